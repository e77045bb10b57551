ERROR_EMAIL_ALREADY_REGISTERED = "Email already registered"
ERROR_INVALID_EMAIL = "Invalid email format"
ERROR_INVALID_EMAIL_OR_PASSWORD = "Invalid email or password"
ERROR_INVALID_TOKEN = "Invalid token"
ERROR_INVALID_USER_ID = "Invalid user id"
ERROR_PASSWORD_TOO_SHORT = "Password must be at least 8 characters"
ERROR_TOKEN_EXPIRED = "Token expired"
ERROR_USER_INACTIVE = "User is inactive"
