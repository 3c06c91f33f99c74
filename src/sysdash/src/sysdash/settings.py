import os

from dotenv import load_dotenv
from loguru import logger

DOTENV_PATH = os.getenv("DOTENV_PATH", ".env")
if os.path.exists(DOTENV_PATH):
    load_dotenv(dotenv_path=DOTENV_PATH)
else:
    logger.debug(f"No .env file found at {DOTENV_PATH}, using defaults/environment variables")

# Polling cadences (seconds)
CPU_INTERVAL = float(os.getenv("SYSDASH_CPU_INTERVAL", "1.0"))
GPU_INTERVAL = float(os.getenv("SYSDASH_GPU_INTERVAL", "1.0"))
NETWORK_INTERVAL = float(os.getenv("SYSDASH_NETWORK_INTERVAL", "1.0"))
PROCESS_INTERVAL = float(os.getenv("SYSDASH_PROCESS_INTERVAL", "2.0"))
HEARTBEAT_INTERVAL = float(os.getenv("SYSDASH_HEARTBEAT_INTERVAL", "0.1"))

# Speedtest sub-loop
SPEEDTEST_INTERVAL = float(os.getenv("SYSDASH_SPEEDTEST_INTERVAL", "300"))  # 5 minutes default
SPEEDTEST_SERVER = os.getenv("SYSDASH_SPEEDTEST_SERVER", "17391")
SPEEDTEST_TIMEOUT = float(os.getenv("SYSDASH_SPEEDTEST_TIMEOUT", "120"))

# External commands (nvidia-smi, sensors, ip, iw)
COMMAND_TIMEOUT = float(os.getenv("SYSDASH_COMMAND_TIMEOUT", "5"))

NETWORK_INTERFACE = os.getenv("SYSDASH_INTERFACE") or None
TOP_PROCESSES = int(os.getenv("SYSDASH_TOP_PROCESSES", "5"))

# Logging; the dashboard owns the terminal so logs only go to a file when requested
LOG_FILE = os.getenv("SYSDASH_LOG_FILE") or None
LOG_LEVEL = os.getenv("SYSDASH_LOG_LEVEL", "INFO").upper()
