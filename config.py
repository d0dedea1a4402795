"""
Настройки бота и клиента игрового сервера (читаются из переменных окружения)
"""
import os
import logging

# Telegram
TOKEN = os.getenv("TOKEN")
WEBHOOK_ENDPOINT_URL = os.getenv("WEBHOOK_ENDPOINT_URL")
WEBHOOK_PATH = os.getenv("WEBHOOK_PATH", "/webhook")
PORT = int(os.getenv("PORT", "8000"))

# Игровой сервер
GAME_SERVICE_URL = os.getenv("GAME_SERVICE_URL", "http://localhost:3000")
REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "5"))

# Пауза перед ходом ИИ, только для вида
AI_THINKING_DELAY = float(os.getenv("AI_THINKING_DELAY", "0.7"))
DEFAULT_DIFFICULTY = os.getenv("DEFAULT_DIFFICULTY", "medium")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

EMPTY_CELL_SYMBOL = "empty"

# Символы игрового поля
SYMBOLS: dict[str, str] = {
    "X": "❌",
    "O": "⭕",
    "X_win": "⭐❌⭐",
    "O_win": "⭐⭕⭐",
    EMPTY_CELL_SYMBOL: "⬜",
}

DIFFICULTY_LABELS: dict[str, str] = {
    "easy": "😺 easy",
    "medium": "😼 medium",
    "hard": "😾 hard",
}

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=LOG_LEVEL,
)
# httpx логирует каждый запрос на INFO
logging.getLogger("httpx").setLevel(logging.WARNING)
logger = logging.getLogger("tictacmeow")
