# Caregiver applications to service requests
