"""
Configuration constants for the Personal Data Vault security core.
"""

# Application Metadata
APP_VERSION = "1.0.0"  # Use: Current version of the package. Type: str. Range: Semantic versioning string (e.g., "1.0.0")
APP_NAME = "Personal Data Vault"  # Use: Full name of the application. Type: str. Range: Any valid string.

# Session Settings
SESSION_TIMEOUT_MINUTES = 30  # Use: Idle timeout of a local session in minutes. Each successful validation slides the expiry forward by this amount. Type: int. Range: Positive integer.

# Login Throttle Settings
MAX_LOGIN_ATTEMPTS = 5  # Use: Number of tracked login attempts after which the user is locked out. Type: int. Range: Positive integer (e.g., 3-10).
LOCKOUT_DURATION_MINUTES = 15  # Use: Duration of a lockout in minutes once MAX_LOGIN_ATTEMPTS is reached. Type: int. Range: Positive integer.

# Security Log Settings
SECURITY_LOG_MAX_ENTRIES = 1000  # Use: Maximum number of security log entries kept. The oldest entries are dropped first. Type: int. Range: Positive integer.
SECURITY_LOG_SOURCE_IP = "local"  # Use: Value recorded in the ip field of every log entry. All events originate on this device. Type: str. Range: Any string.

# Encryption Settings
DEVICE_KEY_SIZE = 32  # Use: Size in bytes of the randomly generated device key (stored hex encoded). Type: int. Range: 16 or more, 32 recommended.
KEY_SIZE = 32  # Use: Size of the derived AES key in bytes. Corresponds to AES-256. Type: int. Range: 16 (AES-128), 24 (AES-192), or 32 (AES-256) bytes.
SALT_SIZE = 16  # Use: Size of the random per-message salt fed to HKDF. Type: int. Range: At least 16 bytes.
NONCE_SIZE = 12  # Use: Size of the Nonce in bytes for AES-GCM. Type: int. Range: 12 bytes (96 bits) is the recommended size for GCM.
TAG_SIZE = 16  # Use: Size of the authentication tag in bytes for AES-GCM. Type: int. Range: 16 bytes (128 bits) is the recommended size for GCM.
TOKEN_MAGIC = b'PDV'  # Use: Magic prefix of every ciphertext token, used to reject foreign input early. Type: bytes. Range: Any short byte string.
TOKEN_VERSION = 1  # Use: Format version byte written after the magic prefix. Type: int. Range: 0-255.

# Master Password Settings
PASSWORD_MIN_LENGTH = 8  # Use: Minimum accepted length of the master password. Type: int. Range: Positive integer, higher is better.
ARGON2_TIME_COST = 2  # Use: Argon2id time cost parameter. Controls the number of iterations. Type: int. Range: Typically 1 to 10.
ARGON2_MEMORY_COST = 65536  # Use: Argon2id memory cost parameter in KiB. Type: int. Range: Recommended to be at least 65536 (64 MB).
ARGON2_PARALLELISM = 4  # Use: Argon2id parallelism parameter. Type: int. Range: Typically 1 to 8.

# Two-Factor Settings
TOTP_ISSUER = "NHCE"  # Use: Issuer shown by authenticator apps for provisioned secrets. Type: str. Range: Any string without ':'.
TOTP_DIGITS = 6  # Use: Number of digits of a TOTP code. Type: int. Range: 6 or 8.
TOTP_PERIOD_SECONDS = 30  # Use: Time step of a TOTP code in seconds. Type: int. Range: Positive integer, 30 is standard.
TOTP_SECRET_SIZE = 20  # Use: Size of a generated TOTP secret in bytes (160 bits, matching SHA1). Type: int. Range: At least 16.
TOTP_VALID_WINDOW = 1  # Use: Number of time steps before and after the current one that are still accepted. Type: int. Range: 0 to 2.

# Sync Settings
SYNC_DELAY_SECONDS = 1.0  # Use: Simulated network delay awaited by a sync pass. Type: float. Range: Non-negative number.
SYNC_MAX_RETRY_COUNT = 3  # Use: Number of failed processing attempts after which a queued change is marked failed. Type: int. Range: Positive integer.

# Storage Keys
NOTES_KEY = "secureNotes"  # Use: Blob name of the secure note collection. Type: str.
SESSIONS_KEY = "sessions"  # Use: Blob name of the session list. Type: str.
LOGIN_ATTEMPTS_KEY = "loginAttempts"  # Use: Blob name of the per-user login attempt records. Type: str.
SECURITY_LOGS_KEY = "securityLogs"  # Use: Blob name of the security event log. Type: str.
DEVICE_KEY_KEY = "deviceKey"  # Use: Blob name of the persisted device key. Type: str.
MASTER_PASSWORD_KEY = "masterPassword"  # Use: Blob name of the master password hash record. Type: str.
TWO_FACTOR_KEY = "twoFactorSecret"  # Use: Blob name of the TOTP secret. Type: str.
SYNC_QUEUE_KEY = "syncQueue"  # Use: Blob name of the offline change queue. Type: str.
SYNC_STATUS_KEY = "syncStatus"  # Use: Blob name of the sync status record. Type: str.

# File and Directory Names
CONFIG_DIR_NAME = ".pdvault"  # Use: Name of the hidden directory within the user's home directory where blobs are stored. Type: str. Range: Any valid directory name.
BLOB_FILE_SUFFIX = ".json"  # Use: Suffix of every blob file written by the file store. Type: str.
