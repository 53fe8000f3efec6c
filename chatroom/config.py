"""Runtime settings read from the environment (a local .env file is honoured)."""
import os
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv


def _origins(raw: str) -> List[str]:
    return [o.strip() for o in raw.split(',') if o.strip()]


@dataclass
class Settings:
    mongo_url: str = 'mongodb://localhost:27017'
    mongo_db: str = 'chatchat'
    host: str = '0.0.0.0'
    port: int = 5000
    # both in milliseconds
    refresh_time: int = 15000
    cutoff_time: int = 10000
    cors_origins: List[str] = field(default_factory=lambda: ['*'])
    log_level: str = 'INFO'

    @classmethod
    def from_env(cls):
        load_dotenv()
        return cls(
            mongo_url=os.environ.get('MONGODB_URI', 'mongodb://localhost:27017'),
            mongo_db=os.environ.get('MONGODB_DB', 'chatchat'),
            host=os.environ.get('HOST', '0.0.0.0'),
            port=int(os.environ.get('PORT', 5000)),
            refresh_time=int(os.environ.get('REFRESH_TIME', 15000)),
            cutoff_time=int(os.environ.get('CUTOFF_TIME', 10000)),
            cors_origins=_origins(os.environ.get('CORS_ORIGINS', '*')),
            log_level=os.environ.get('LOG_LEVEL', 'INFO'),
        )
