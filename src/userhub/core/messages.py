"""User-facing messages shared by services and routers."""

INVALID_REQUEST = "Invalid request"
EMAIL_ALREADY_EXISTS = "Email already exists"
USER_REGISTERED = "User registered successfully"
INVALID_CREDENTIALS = "Invalid credentials"
LOGIN_SUCCESSFUL = "Login successful"
USER_INFO_RETRIEVED = "User info retrieved"

USER_NOT_FOUND = "User not found"
USER_ADDED = "User added successfully!"
USER_ALREADY_EXISTS = "User already exists!"
USER_UPDATED = "Updated"
USER_DELETED = "User deleted successfully!"
USER_DOES_NOT_EXIST = "User doesn't exist!"
SUCCESS = "Success"
NO_USERS_FOUND = "No users found"
AVATAR_UPLOADED = "Avatar uploaded successfully"
FILE_REQUIRED = "File is required."
NO_AVATAR_FOUND = "No avatar found."
AVATAR_UPLOAD_ERROR = "An error occurred while uploading avatar."
CACHE_CLEARED = "Caches cleared successfully."
