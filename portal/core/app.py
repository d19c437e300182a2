import logging
import secrets
import sys
from typing import Optional

from .cache_helper import CacheHelper
from .config import Config, _as_int
from .db import Database


class PortalApp:
    """
    Composition root. Builds every component once from config, in dependency
    order, and hands each service its collaborators explicitly. close() tears
    them down in reverse.
    """

    def __init__(self, config_path: Optional[str] = None, config: Optional[Config] = None, configure_logging: bool = True):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.config = config or Config(config_path=config_path)

        if configure_logging:
            self._setup_logging()

        mock_mode = self.config.mock_mode
        delay_ms = self.config.mock_delay_ms
        failure_rate = self.config.mock_failure_rate
        self.logger.info(f"Starting student portal (mock mode: {mock_mode})")

        jwt_config = self.config.section("jwt")
        jwt_secret = self._jwt_secret(jwt_config.get("secret"), "secret", mock_mode)
        jwt_refresh_secret = self._jwt_secret(jwt_config.get("refresh_secret"), "refresh_secret", mock_mode)

        self.cache = CacheHelper(self.config.cache_dir)
        self.db = Database(self.config.data)

        from portal.plugins.intranet.backends import get_backend as get_intranet_backend
        from portal.plugins.lms.backends import get_backend as get_lms_backend
        from portal.plugins.chat.responders import get_responder

        self.intranet = get_intranet_backend(
            mock_mode, self.cache, self.config.section("intranet"), delay_ms=delay_ms, failure_rate=failure_rate
        )
        self.lms = get_lms_backend(
            mock_mode, self.cache, self.config.section("lms"), delay_ms=delay_ms, failure_rate=failure_rate
        )
        self.responder = get_responder(mock_mode, self.config.section("openai"), delay_ms=delay_ms)

        from portal.plugins.auth.service import AuthService
        from portal.plugins.auth.tokens import TokenService
        from portal.plugins.chat.service import ChatService
        from portal.plugins.events.service import EventsService
        from portal.plugins.rewards.service import RewardsService
        from portal.plugins.schedule.service import ScheduleService
        from portal.plugins.tools.service import ToolsService

        self.tokens = TokenService(
            self.cache,
            secret=jwt_secret,
            refresh_secret=jwt_refresh_secret,
            access_ttl_seconds=_as_int(jwt_config.get("access_ttl_seconds"), 3600),
            refresh_ttl_seconds=_as_int(jwt_config.get("refresh_ttl_seconds"), 7 * 24 * 3600),
        )
        self.auth = AuthService(self.db, self.tokens, cache=self.cache)
        self.chat = ChatService(self.db, self.responder)
        self.schedule = ScheduleService(self.intranet)
        self.rewards = RewardsService(self.db)
        self.events = EventsService(self.db, self.cache)
        self.tools = ToolsService(self.db)

    def _jwt_secret(self, value: Optional[str], name: str, mock_mode: bool) -> str:
        if value:
            return value
        if not mock_mode:
            raise ValueError(f"jwt.{name} must be set when mock mode is off")
        self.logger.warning(f"jwt.{name} not set, using a throwaway secret for this mock session")
        return secrets.token_hex(32)

    def _setup_logging(self):
        """Configure logging to write to stdout and, when logging.file is set, to a file"""
        root_logger = logging.getLogger()
        for handler in list(root_logger.handlers):
            root_logger.removeHandler(handler)
        root_logger.setLevel(getattr(logging, self.config.log_level, logging.INFO))

        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'
        )

        if self.config.log_file:
            file_handler = logging.FileHandler(self.config.log_file)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

        logging.info("Student portal starting...")

    def close(self) -> None:
        self.logger.info("Shutting down student portal")
        self.lms.close()
        self.intranet.close()
        self.db.close()
