import logging
import logging.handlers
import os
from typing import Optional

class MediaDiscoveryLogger:
    """Custom logger for crawl and profile extraction operations"""

    def __init__(self, name: str = "media_discovery"):
        self.logger = logging.getLogger(name)
        self._setup_logger()

    def _setup_logger(self):
        """Setup logger with appropriate handlers and formatters"""
        if self.logger.handlers:
            return  # Already configured

        self.logger.setLevel(logging.DEBUG)

        # Create logs directory if it doesn't exist
        log_dir = os.path.join(os.path.dirname(__file__), '..', '..', 'logs')
        os.makedirs(log_dir, exist_ok=True)

        # Console handler
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.INFO)
        console_formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
        console_handler.setFormatter(console_formatter)
        self.logger.addHandler(console_handler)

        # File handler for general logs
        file_handler = logging.handlers.RotatingFileHandler(
            os.path.join(log_dir, 'media_discovery.log'),
            maxBytes=10*1024*1024,  # 10MB
            backupCount=5
        )
        file_handler.setLevel(logging.DEBUG)
        file_formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
        )
        file_handler.setFormatter(file_formatter)
        self.logger.addHandler(file_handler)

        # Separate handler for crawl operations
        crawl_handler = logging.handlers.RotatingFileHandler(
            os.path.join(log_dir, 'crawls.log'),
            maxBytes=50*1024*1024,  # 50MB
            backupCount=10
        )
        crawl_handler.setLevel(logging.DEBUG)
        crawl_formatter = logging.Formatter(
            '%(asctime)s - CRAWL_%(crawl_id)s - %(stage)s - %(levelname)s - %(message)s'
        )
        crawl_handler.setFormatter(crawl_formatter)

        # Only records tagged with a crawl id go to this handler
        crawl_handler.addFilter(lambda record: hasattr(record, 'crawl_id'))
        self.logger.addHandler(crawl_handler)

        # Error handler for critical issues
        error_handler = logging.handlers.RotatingFileHandler(
            os.path.join(log_dir, 'errors.log'),
            maxBytes=10*1024*1024,  # 10MB
            backupCount=5
        )
        error_handler.setLevel(logging.ERROR)
        error_formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
        )
        error_handler.setFormatter(error_formatter)
        self.logger.addHandler(error_handler)

    @staticmethod
    def _extra(crawl_id: Optional[str], stage: Optional[str]) -> dict:
        extra = {}
        if crawl_id is not None:
            extra['crawl_id'] = crawl_id
            # The crawl formatter needs a stage whenever a crawl id is present
            extra['stage'] = stage or 'SYSTEM'
        elif stage is not None:
            extra['stage'] = stage
        return extra

    def log_crawl_start(self, crawl_id: str, url: str):
        """Log the start of a crawl"""
        self.logger.info(f"Starting media crawl for URL: {url}", extra=self._extra(crawl_id, 'SYSTEM'))

    def log_crawl_complete(self, crawl_id: str, duration: float, images: int, videos: int, floorplans: int):
        """Log the completion of a crawl"""
        message = (
            f"Media crawl completed in {duration:.2f} seconds: "
            f"{images} images, {videos} videos, {floorplans} floorplans"
        )
        self.logger.info(message, extra=self._extra(crawl_id, 'SYSTEM'))

    def log_crawl_failed(self, crawl_id: str, error: str, duration: Optional[float] = None):
        """Log the failure of a crawl"""
        message = f"Media crawl failed: {error}"
        if duration is not None:
            message += f" (failed after {duration:.2f} seconds)"
        self.logger.error(message, extra=self._extra(crawl_id, 'SYSTEM'))

    def log_extraction_pass(self, crawl_id: str, label: str, images: int, videos: int,
                            floorplans: int, new_urls: int):
        """Log the result of a single extraction pass"""
        message = (
            f"Extraction pass '{label}': {images} images, {videos} videos, "
            f"{floorplans} floorplans ({new_urls} new)"
        )
        self.logger.info(message, extra=self._extra(crawl_id, 'EXTRACT'))

    def log_skip(self, crawl_id: str, skip: Exception):
        """Log an exploration failure that was recovered locally"""
        self.logger.warning(f"Skipped during exploration: {skip}", extra=self._extra(crawl_id, 'EXPLORE'))

    def debug(self, message: str, crawl_id: Optional[str] = None, stage: Optional[str] = None):
        """Log debug message"""
        self.logger.debug(message, extra=self._extra(crawl_id, stage))

    def info(self, message: str, crawl_id: Optional[str] = None, stage: Optional[str] = None):
        """Log info message"""
        self.logger.info(message, extra=self._extra(crawl_id, stage))

    def warning(self, message: str, crawl_id: Optional[str] = None, stage: Optional[str] = None):
        """Log warning message"""
        self.logger.warning(message, extra=self._extra(crawl_id, stage))

    def error(self, message: str, crawl_id: Optional[str] = None, stage: Optional[str] = None, exc_info=None):
        """Log error message"""
        self.logger.error(message, extra=self._extra(crawl_id, stage), exc_info=exc_info)

# Global logger instance
discovery_logger = MediaDiscoveryLogger()

def get_logger() -> MediaDiscoveryLogger:
    """Get the global media discovery logger instance"""
    return discovery_logger

def setup_flask_logging(app):
    """Setup Flask application logging"""
    if not app.debug:
        # In production, log to file
        log_dir = os.path.join(os.path.dirname(__file__), '..', '..', 'logs')
        os.makedirs(log_dir, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            os.path.join(log_dir, 'flask_app.log'),
            maxBytes=10*1024*1024,  # 10MB
            backupCount=5
        )
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(logging.INFO)
        app.logger.addHandler(file_handler)
        app.logger.setLevel(logging.INFO)
        app.logger.info('Media Discovery Service startup')
