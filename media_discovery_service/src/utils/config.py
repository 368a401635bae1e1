import os
from typing import Dict, Any, Optional
from dataclasses import dataclass

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

DEFAULT_BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/122.0.0.0 Safari/537.36"
)


def _optional_int(name: str) -> Optional[int]:
    value = os.getenv(name, '').strip()
    return int(value) if value else None


@dataclass
class CrawlerConfig:
    """Configuration for the browser-driven media crawler"""
    headless: bool = True
    navigation_timeout_ms: int = 45000
    media_wait_timeout_ms: int = 10000
    load_settle_ms: int = 5000
    click_settle_ms: int = 2000
    click_timeout_ms: int = 5000
    viewport_width: int = 1920
    viewport_height: int = 1080
    user_agent: str = DEFAULT_BROWSER_USER_AGENT
    max_clicks: Optional[int] = None
    stop_after_idle_clicks: Optional[int] = None
    debug_screenshot_path: Optional[str] = None

@dataclass
class ProfileConfig:
    """Configuration for the static agent-profile extractor"""
    fetch_timeout_seconds: int = 20
    max_retries: int = 3
    retry_delay_seconds: float = 1.0
    user_agent: str = DEFAULT_BROWSER_USER_AGENT

@dataclass
class AppConfig:
    """Main application configuration"""
    secret_key: str
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 5000
    cors_origins: str = "*"

class ConfigManager:
    """Centralized configuration management"""

    def __init__(self):
        self._crawler_config = None
        self._profile_config = None
        self._app_config = None

    @property
    def crawler(self) -> CrawlerConfig:
        """Get crawler configuration"""
        if self._crawler_config is None:
            self._crawler_config = CrawlerConfig(
                headless=os.getenv('CRAWL_HEADLESS', 'true').lower() == 'true',
                navigation_timeout_ms=int(os.getenv('CRAWL_NAVIGATION_TIMEOUT_MS', '45000')),
                media_wait_timeout_ms=int(os.getenv('CRAWL_MEDIA_WAIT_TIMEOUT_MS', '10000')),
                load_settle_ms=int(os.getenv('CRAWL_LOAD_SETTLE_MS', '5000')),
                click_settle_ms=int(os.getenv('CRAWL_CLICK_SETTLE_MS', '2000')),
                click_timeout_ms=int(os.getenv('CRAWL_CLICK_TIMEOUT_MS', '5000')),
                viewport_width=int(os.getenv('CRAWL_VIEWPORT_WIDTH', '1920')),
                viewport_height=int(os.getenv('CRAWL_VIEWPORT_HEIGHT', '1080')),
                user_agent=os.getenv('CRAWL_USER_AGENT', DEFAULT_BROWSER_USER_AGENT),
                max_clicks=_optional_int('CRAWL_MAX_CLICKS'),
                stop_after_idle_clicks=_optional_int('CRAWL_STOP_AFTER_IDLE_CLICKS'),
                debug_screenshot_path=os.getenv('CRAWL_DEBUG_SCREENSHOT_PATH') or None
            )
        return self._crawler_config

    @property
    def profile(self) -> ProfileConfig:
        """Get profile extractor configuration"""
        if self._profile_config is None:
            self._profile_config = ProfileConfig(
                fetch_timeout_seconds=int(os.getenv('PROFILE_FETCH_TIMEOUT_SECONDS', '20')),
                max_retries=int(os.getenv('PROFILE_MAX_RETRIES', '3')),
                retry_delay_seconds=float(os.getenv('PROFILE_RETRY_DELAY_SECONDS', '1')),
                user_agent=os.getenv('PROFILE_USER_AGENT', DEFAULT_BROWSER_USER_AGENT)
            )
        return self._profile_config

    @property
    def app(self) -> AppConfig:
        """Get application configuration"""
        if self._app_config is None:
            self._app_config = AppConfig(
                secret_key=os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production'),
                debug=os.getenv('DEBUG', 'false').lower() == 'true',
                host=os.getenv('HOST', '0.0.0.0'),
                port=int(os.getenv('PORT', '5000')),
                cors_origins=os.getenv('CORS_ORIGINS', '*')
            )
        return self._app_config

    def validate_config(self) -> Dict[str, Any]:
        """Validate configuration and return any issues"""
        issues = []

        crawler = self.crawler
        # Playwright treats a timeout of 0 as "wait forever"
        for name, value in (
            ('CRAWL_NAVIGATION_TIMEOUT_MS', crawler.navigation_timeout_ms),
            ('CRAWL_MEDIA_WAIT_TIMEOUT_MS', crawler.media_wait_timeout_ms),
            ('CRAWL_CLICK_TIMEOUT_MS', crawler.click_timeout_ms),
        ):
            if value <= 0:
                issues.append(f"{name} must be positive")

        for name, value in (
            ('CRAWL_LOAD_SETTLE_MS', crawler.load_settle_ms),
            ('CRAWL_CLICK_SETTLE_MS', crawler.click_settle_ms),
        ):
            if value < 0:
                issues.append(f"{name} must not be negative")

        if crawler.max_clicks is not None and crawler.max_clicks < 0:
            issues.append("CRAWL_MAX_CLICKS must not be negative")

        if self.profile.max_retries < 1:
            issues.append("PROFILE_MAX_RETRIES must be at least 1")

        # Validate app configuration
        if self.app.secret_key == 'dev-secret-key-change-in-production' and not self.app.debug:
            issues.append("SECRET_KEY should be changed in production")

        return {
            'valid': len(issues) == 0,
            'issues': issues,
            'config_summary': {
                'crawler': {
                    'headless': crawler.headless,
                    'navigation_timeout_ms': crawler.navigation_timeout_ms,
                    'viewport': f"{crawler.viewport_width}x{crawler.viewport_height}",
                    'max_clicks': crawler.max_clicks
                },
                'profile': {
                    'fetch_timeout_seconds': self.profile.fetch_timeout_seconds,
                    'max_retries': self.profile.max_retries
                },
                'app': {
                    'debug': self.app.debug,
                    'host': self.app.host,
                    'port': self.app.port
                }
            }
        }

# Global configuration instance
config = ConfigManager()

def get_config() -> ConfigManager:
    """Get the global configuration instance"""
    return config
