# User profiles
