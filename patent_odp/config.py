from __future__ import annotations

from dataclasses import dataclass
import os


@dataclass(frozen=True)
class Settings:
    odp_base_url: str = os.getenv("ODP_BASE_URL", "https://api.uspto.gov")
    odp_api_key: str = os.getenv("ODP_API_KEY", "")
    user_agent: str = os.getenv("ODP_USER_AGENT", "PatentDev/1.0")
    timeout: float = float(os.getenv("ODP_TIMEOUT", "30"))

    @property
    def search_url(self) -> str:
        return f"{self.odp_base_url.rstrip('/')}/api/v1/patent/applications/search"

    def application_url(self, application_number: str) -> str:
        return f"{self.odp_base_url.rstrip('/')}/api/v1/patent/applications/{application_number}"


SETTINGS = Settings()
