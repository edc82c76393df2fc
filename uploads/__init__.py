# File uploads and signed URLs
