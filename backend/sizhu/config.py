"""應用程式設定模組

使用 pydantic-settings 管理應用程式配置，
支援從環境變數和 .env 檔案載入設定。
"""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


# 套件目錄（內含預先計算的節氣資料）
PACKAGE_DIR = Path(__file__).resolve().parent
DATA_DIR = PACKAGE_DIR / "data"


class Settings(BaseSettings):
    """應用程式設定類別

    Attributes:
        app_name: 應用程式名稱
        debug: 是否啟用除錯模式
        log_level: 日誌等級
        data_dir: 資料目錄路徑
        solar_terms_file: 預先計算的節氣表 (JSON)
        ephemeris_dir: 星曆表 (skyfield) 下載目錄
        approximation_enabled: 查無節氣表時是否改用天文近似計算
        approximation_min_year: 天文近似計算支援的最早年份
        approximation_max_year: 天文近似計算支援的最晚年份
        cache_ttl_seconds: 命盤快取存活秒數
        cors_origins: 允許的跨來源網域
    """

    app_name: str = "四柱排盤 API"
    debug: bool = True
    log_level: str = "INFO"
    data_dir: Path = DATA_DIR
    solar_terms_file: Path = DATA_DIR / "solar_terms.json"
    ephemeris_dir: Path = Path("data")
    approximation_enabled: bool = True
    approximation_min_year: int = 1800
    approximation_max_year: int = 2200
    cache_ttl_seconds: float = 24 * 60 * 60
    cors_origins: list[str] = ["http://localhost:3000"]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


# 全域設定實例
settings = Settings()
