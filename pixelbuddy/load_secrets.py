import os
import pathlib
from dotenv import load_dotenv

load_dotenv()

user = os.getenv("DB_USER")
password = os.getenv("DB_PASSWORD")
host = os.getenv("DB_HOST")
port = os.getenv("DB_PORT", "5432")
db_name = os.getenv("DB_NAME")

sqlite_path = pathlib.Path(__file__).parents[1] / "pixelbuddy.sqlite3"

database_url = os.getenv("DATABASE_URL")
if not database_url:
    if user and host and db_name:
        database_url = f"postgresql+asyncpg://{user}:{password}@{host}:{port}/{db_name}"
    else:
        database_url = f"sqlite+aiosqlite:///{sqlite_path}"
elif database_url.startswith("postgres://") or database_url.startswith("postgresql://"):
    # Hosted providers hand out plain libpq URLs
    database_url = "postgresql+asyncpg://" + database_url.split("://", 1)[1]

ollama_url = os.getenv("OLLAMA_URL", "http://localhost:11434")
ollama_model = os.getenv("OLLAMA_MODEL", "llama3.2:1b")
ollama_timeout = float(os.getenv("OLLAMA_TIMEOUT", "10"))

cors_origin = os.getenv("CORS_ORIGIN", "*")
action_rate_limit = os.getenv("ACTION_RATE_LIMIT", "30/minute")
api_url = os.getenv("PIXELBUDDY_API_URL", "http://localhost:3000/api")

if __name__ == "__main__":
    print(database_url, ollama_url, ollama_model, ollama_timeout, cors_origin)
