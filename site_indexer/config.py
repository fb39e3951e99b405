# === FILE: site_indexer/config.py ===
"""
Модуль для загрузки и валидации конфигурации SiteIndexer.
Используется Pydantic для описания схемы и проверки данных.

Секреты (endpoint и ключ индекса, ключ сервиса генерации кода) в файл
конфигурации не попадают: они читаются из окружения, см. :class:`Credentials`.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Literal, Mapping, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, HttpUrl

from site_indexer.errors import ConfigurationError

__all__ = ("IndexerConfig", "Credentials", "load_config", "read_config_file", "DEFAULT_CONFIG_PATH")


class IndexerConfig(BaseModel):
    """Конфигурация одного запуска обхода."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    base_url: HttpUrl = Field(..., description="Стартовый URL обхода.")
    index_name: str = Field(..., min_length=1, description="Имя индекса для записи документов.")
    concurrency: int = Field(5, ge=1, description="Максимум одновременно обрабатываемых страниц.")
    strategy: Literal["static", "generated"] = Field("static", description="Стратегия извлечения текста.")
    max_pages: Optional[int] = Field(None, ge=1, description="Лимит числа страниц (None: без лимита).")
    max_depth: Optional[int] = Field(None, ge=0, description="Лимит глубины ссылок (None: без лимита).")
    same_host_only: bool = Field(True, description="Ставить в очередь только ссылки того же хоста.")
    navigation_timeout: float = Field(30.0, gt=0, description="Таймаут навигации браузера (секунд).")
    wait_until: Literal["load", "domcontentloaded", "networkidle", "commit"] = Field(
        "load", description="Событие, до которого ждёт навигация."
    )
    request_timeout: Optional[float] = Field(None, gt=0, description="Таймаут обработки одной страницы (секунд).")
    user_agent: Optional[str] = Field(None, min_length=1, description="Заголовок User-Agent.")
    headless: bool = Field(True, description="Запускать браузер без окна.")
    sample_timeout: float = Field(15.0, gt=0, description="Таймаут загрузки образца страницы (секунд).")
    max_sample_chars: int = Field(50_000, ge=1000, description="Сколько символов разметки отправлять генератору.")
    codegen_model: str = Field("gpt-4o-mini", min_length=1, description="Модель для генерации экстрактора.")


class Credentials(BaseModel):
    """Учётные данные внешних сервисов из переменных окружения."""
    model_config = ConfigDict(frozen=True)

    es_endpoint: Optional[str] = None
    es_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    openai_base_url: Optional[str] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> Credentials:
        env = os.environ if environ is None else environ
        return cls(
            es_endpoint=env.get("ES_ENDPOINT") or None,
            es_api_key=env.get("ES_API_KEY") or None,
            openai_api_key=env.get("OPENAI_API_KEY") or None,
            openai_base_url=env.get("OPENAI_BASE_URL") or None,
        )

    def require_index(self) -> None:
        if not self.es_endpoint:
            raise ConfigurationError("ES_ENDPOINT is not set")

    def require_codegen(self) -> None:
        if not self.openai_api_key:
            raise ConfigurationError("OPENAI_API_KEY is not set (required by the generated strategy)")


DEFAULT_CONFIG_PATH = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Неправильный YAML в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень YAML должен быть mapping, получено {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Неправильный JSON в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень JSON должен быть mapping, получено {type(data).__name__}")
    return data


def read_config_file(path: Union[str, Path, None]) -> dict[str, Any]:
    """
    Читает YAML или JSON в словарь.
    Без явного пути используется configs/default.yaml, если он есть, иначе {}.
    """
    if path is None:
        if not DEFAULT_CONFIG_PATH.is_file():
            return {}
        path_obj = DEFAULT_CONFIG_PATH
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return _read_yaml(path_obj)
    if suffix == ".json":
        return _read_json(path_obj)
    raise ValueError(f"Неподдерживаемый формат конфига: {suffix}")


def load_config(path: Union[str, Path, None] = None, **overrides: Any) -> IndexerConfig:
    """
    Возвращает проверенный IndexerConfig: файл конфигурации плюс переопределения
    из CLI (значения None игнорируются).
    При отсутствии явно указанного файла бросает FileNotFoundError,
    при ошибке схемы pydantic.ValidationError.
    """
    data = read_config_file(path)
    data.update({key: value for key, value in overrides.items() if value is not None})
    return IndexerConfig(**data)
