# Service requests and their sub-resources
