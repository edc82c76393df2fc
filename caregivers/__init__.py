# Caregiver profiles
