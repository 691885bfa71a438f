RUNTIME_HOST = "127.0.0.1"
RUNTIME_PORT = 3000

# Model discovery
DEFAULT_POLL_INTERVAL_MS = 2000
RECOGNIZED_EXTENSIONS = ("gguf", "bin", "safetensors", "pth", "pt")
DEFAULT_BINDING = "gpt4all"

# Users / history
USERS_FILE_NAME = "users.json"
HISTORY_LIMIT = 200
SESSION_COOKIE = "localchat_session"
