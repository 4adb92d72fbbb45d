from dataclasses import dataclass, field
from environs import Env


@dataclass
class JWTConfig:
    secret_key: str
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 480  # 0 disables expiry


@dataclass
class SecurityConfig:
    bcrypt_work_factor: int = 12


@dataclass
class DBConfig:
    """ PostgreSQL """
    host: str | None = None
    port: int | None = None
    name: str | None = None
    user: str | None = None
    password: str | None = None

    """ SQLite """
    path: str = "data/messagely.db"

    echo: bool = False

    @property
    def is_postgres(self) -> bool:
        return bool(self.host)


@dataclass
class LoggingConfig:
    level: str = "INFO"


@dataclass
class Config:
    """ Config """
    jwt: JWTConfig
    db: DBConfig
    security: SecurityConfig = field(default_factory=SecurityConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(path: str | None) -> Config:
    env = Env()
    env.read_env(path)

    return Config(
        jwt=JWTConfig(
            secret_key=env('SECRET_KEY'),
            algorithm=env('JWT_ALGORITHM', 'HS256'),
            access_token_expire_minutes=env.int('ACCESS_TOKEN_EXPIRE_MINUTES', 480),
        ),
        db=DBConfig(
            host=env('DB_HOST', None),
            port=env.int('DB_PORT', None),
            name=env('DB_NAME', None),
            user=env('DB_USER', None),
            password=env('DB_PASSWORD', None),
            path=env('DB_PATH', 'data/messagely.db'),
            echo=env.bool('DB_ECHO', False)
        ),
        security=SecurityConfig(
            bcrypt_work_factor=env.int('BCRYPT_WORK_FACTOR', 12)
        ),
        logging=LoggingConfig(
            level=env('LOG_LEVEL', 'INFO')
        )
    )
