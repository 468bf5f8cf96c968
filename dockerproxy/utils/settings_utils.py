import os
from pathlib import Path
from typing import Any

import structlog
from pydantic_settings import (
    PydanticBaseSettingsSource,
)

logger = structlog.stdlib.get_logger(__name__)


class DockerSecretsSettingsSource(PydanticBaseSettingsSource):
    """
    Custom settings source that reads Docker secrets from files.

    For any setting, if an environment variable <SETTING_NAME>_FILE exists,
    it will read the value from that file path.

    Example:
        If ROUTES_FILE=/run/secrets/proxy_routes
        Then ROUTES will be read (as JSON) from that file
    """

    def get_field_value(
        self, field_name: str, field_info: Any
    ) -> tuple[Any, str, bool]:
        file_path = os.getenv(f"{field_name}_FILE")
        if not file_path:
            return None, field_name, False

        path = Path(file_path)
        if not path.exists():
            logger.warning(
                "Secret file does not exist", setting=field_name, path=file_path
            )
            return None, field_name, False

        try:
            secret_value = path.read_text().strip()
        except OSError as e:
            logger.warning(
                "Could not read secret file",
                setting=field_name,
                path=file_path,
                error=str(e),
            )
            return None, field_name, False

        return secret_value, field_name, self.field_is_complex(field_info)

    def prepare_field_value(
        self, field_name: str, field: Any, value: Any, value_is_complex: bool
    ) -> Any:
        if value is not None and value_is_complex:
            return self.decode_complex_value(field_name, field, value)
        return value

    def __call__(self) -> dict[str, Any]:
        d: dict[str, Any] = {}

        for field_name, field_info in self.settings_cls.model_fields.items():
            field_value, field_key, value_is_complex = self.get_field_value(
                field_name, field_info
            )
            field_value = self.prepare_field_value(
                field_name, field_info, field_value, value_is_complex
            )
            if field_value is not None:
                d[field_key] = field_value

        return d
