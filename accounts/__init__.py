# Account registration, login and account state
