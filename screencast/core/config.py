"""
➡️ But : Centraliser tous les paramètres configurables (nom d’app, chemin DB, stockage S3, URLs...)

Utilise pydantic-settings pour charger automatiquement les variables d’environnement (.env, variables système…).

Fournit un objet settings unique, que tu importes ailleurs :

from screencast.core.config import settings
print(settings.APP_NAME)


🔹 Avantages :

Plus propre que des constantes éparpillées dans le code.

Facilite le passage entre environnements (dev / prod / test).
"""

from typing import List, Optional

from pydantic_settings import BaseSettings

from screencast.core.errors import ConfigurationError


class Settings(BaseSettings):
    # -----------------------------
    # App
    # -----------------------------
    APP_NAME: str = "Screencast"
    ENV: str = "dev"  # dev | prod | test
    LOG_LEVEL: Optional[str] = None  # auto selon ENV si None

    # Base publique de l'application (liens de partage /videos/<id>)
    APP_BASE_URL: str = "http://localhost:3000"
    CORS_ORIGINS: List[str] = ["*"]

    # -----------------------------
    # DB
    # -----------------------------
    SQLITE_PATH: str = "screencast.db"  # fichier SQLite
    # Si tu veux forcer une URL différente (ex: Postgres), définis DATABASE_URL dans l'env.
    DATABASE_URL: Optional[str] = None

    # -----------------------------
    # Stockage objet (S3 / MinIO)
    # -----------------------------
    S3_ENDPOINT: Optional[str] = None          # None -> endpoint AWS par défaut
    S3_PUBLIC_ENDPOINT: Optional[str] = None   # hôte utilisé pour signer les URLs données au navigateur
    S3_REGION: str = "eu-north-1"
    S3_KEY: Optional[str] = None
    S3_SECRET: Optional[str] = None
    S3_BUCKET: Optional[str] = None            # ⚠️ aucun défaut : on échoue plutôt que d'écrire ailleurs

    VIDEO_KEY_PREFIX: str = "videos"
    VIDEO_CONTENT_TYPE: str = "video/webm"
    VIDEO_EXTENSION: str = ".webm"
    MAX_UPLOAD_MB: int = 500

    UPLOAD_URL_TTL_SECONDS: int = 7 * 24 * 60 * 60   # 7 jours (max SigV4)
    DELIVERY_URL_TTL_SECONDS: int = 60 * 60          # 1 heure

    # -----------------------------
    # Client (cache local + transcodeur)
    # -----------------------------
    LOCAL_CACHE_PATH: str = "screencast-cache.db"
    FFMPEG_BINARY: str = "ffmpeg"
    FFPROBE_BINARY: str = "ffprobe"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
    }

    # -----------------------------
    # Post-process values
    # -----------------------------
    def model_post_init(self, __context): # appelée automatiquement
        # DATABASE_URL par défaut depuis SQLITE_PATH si non fourni
        if not self.DATABASE_URL:
            object.__setattr__(self, "DATABASE_URL", f"sqlite:///{self.SQLITE_PATH}")

        if self.LOG_LEVEL is None:
            object.__setattr__(self, "LOG_LEVEL", "DEBUG" if self.ENV == "dev" else "INFO")

        object.__setattr__(self, "APP_BASE_URL", self.APP_BASE_URL.rstrip("/"))

    def require_storage(self) -> None:
        """
        Vérifie que le stockage objet est configuré.
        Lève ConfigurationError en nommant les clés manquantes (jamais leurs valeurs).
        """
        missing = [
            name
            for name in ("S3_KEY", "S3_SECRET", "S3_BUCKET")
            if not getattr(self, name)
        ]
        if missing:
            raise ConfigurationError(
                "Object storage is not configured",
                details=f"missing settings: {', '.join(missing)}",
            )


# Instance globale importable partout
settings = Settings()
