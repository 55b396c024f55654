import json
import logging
import re
from datetime import datetime, timezone
from typing import Dict, Any, Optional
from contextvars import ContextVar

# Context variables for correlation
lookup_id_var: ContextVar[Optional[str]] = ContextVar('lookup_id', default=None)
stage_var: ContextVar[Optional[str]] = ContextVar('stage', default=None)


def mask_secret(secret: str) -> str:
    """Keep the first and last four characters of a secret, star the rest."""
    if len(secret) > 8:
        return secret[:4] + '*' * (len(secret) - 8) + secret[-4:]
    return '*' * len(secret)


class SecretMasker:
    """Masks sensitive information in log messages."""

    def __init__(self):
        """Initialize secret masker with patterns."""
        # Patterns with a "<name>: <secret>" shape; the secret is group 2
        self.patterns = [
            # API keys and tokens
            r'(?i)(api_key|api-key|apikey|token|key|secret|password|auth)[\s]*[:=][\s]*["\']?([a-zA-Z0-9\-_\.]{10,})["\']?',
            # Gemini header name
            r'(?i)(x-goog-api-key)[\s]*[:=][\s]*["\']?([a-zA-Z0-9\-_\.]{10,})["\']?',
        ]
        self.compiled_patterns = [re.compile(pattern) for pattern in self.patterns]
        # Bare Google API keys anywhere in text
        self.google_key_pattern = re.compile(r'AIza[0-9A-Za-z\-_]{20,}')

    def mask_secrets(self, text: str) -> str:
        """Mask sensitive information in text."""
        if not text:
            return text

        masked_text = self.google_key_pattern.sub(lambda m: mask_secret(m.group(0)), text)

        for pattern in self.compiled_patterns:
            def replace_match(match):
                return f"{match.group(1)}: {mask_secret(match.group(2))}"

            masked_text = pattern.sub(replace_match, masked_text)

        return masked_text

    def mask_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Mask sensitive information in dictionary."""
        if not data:
            return data

        masked_data = {}

        for key, value in data.items():
            if isinstance(value, str):
                if key.lower() in ('api_key', 'key', 'credential', 'x-goog-api-key'):
                    masked_data[key] = mask_secret(value)
                else:
                    masked_data[key] = self.mask_secrets(value)
            elif isinstance(value, dict):
                masked_data[key] = self.mask_dict(value)
            elif isinstance(value, list):
                masked_data[key] = [self.mask_dict(item) if isinstance(item, dict)
                                    else self.mask_secrets(item) if isinstance(item, str)
                                    else item for item in value]
            else:
                masked_data[key] = value

        return masked_data


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def __init__(self):
        """Initialize formatter."""
        super().__init__()
        self.masker = SecretMasker()

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        lookup_id = lookup_id_var.get()
        stage = stage_var.get()

        log_entry = {
            'ts': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            'level': record.levelname,
            'logger': record.name,
            'message': self.masker.mask_secrets(record.getMessage()),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno
        }

        if lookup_id:
            log_entry['lookupId'] = lookup_id
        if stage:
            log_entry['stage'] = stage

        if record.exc_info:
            log_entry['exception'] = self.masker.mask_secrets(self.formatException(record.exc_info))

        if hasattr(record, 'fields') and record.fields:
            log_entry['fields'] = self.masker.mask_dict(record.fields)

        return json.dumps(log_entry, ensure_ascii=False)


class CorrelationContext:
    """Context manager for correlation data."""

    def __init__(self, lookup_id: Optional[str] = None, stage: Optional[str] = None):
        """Initialize correlation context."""
        self.lookup_id = lookup_id
        self.stage = stage
        self._tokens = []

    def __enter__(self):
        """Set correlation context."""
        if self.lookup_id is not None:
            self._tokens.append((lookup_id_var, lookup_id_var.set(self.lookup_id)))
        if self.stage is not None:
            self._tokens.append((stage_var, stage_var.set(self.stage)))
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Restore correlation context."""
        while self._tokens:
            var, token = self._tokens.pop()
            var.reset(token)


def setup_logging(level: str = 'INFO', log_file: Optional[str] = None) -> logging.Logger:
    """Setup structured logging on the 'trackfinder' logger."""
    logger = logging.getLogger('trackfinder')
    logger.setLevel(getattr(logging, level.upper()))

    # Clear existing handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = StructuredFormatter()

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str = 'trackfinder') -> logging.Logger:
    """Get logger with structured formatting."""
    return logging.getLogger(name)


def log_with_fields(logger: logging.Logger, level: str, message: str,
                    fields: Optional[Dict[str, Any]] = None, **kwargs):
    """Log message with additional fields."""
    levelno = getattr(logging, level.upper())
    if not logger.isEnabledFor(levelno):
        return

    merged = dict(fields or {})
    merged.update(kwargs)
    logger.log(levelno, message, extra={'fields': merged} if merged else None)


def log_lookup_start(logger: logging.Logger, lookup_id: str, artist: str, album: str, **kwargs):
    """Log lookup start."""
    with CorrelationContext(lookup_id=lookup_id, stage='start'):
        log_with_fields(logger, 'INFO', 'Lookup started', {
            'artist': artist,
            'album': album,
            **kwargs
        })


def log_lookup_complete(logger: logging.Logger, lookup_id: str, outcome_kind: str,
                        track_count: int, duration_ms: int, **kwargs):
    """Log lookup completion."""
    with CorrelationContext(lookup_id=lookup_id, stage='complete'):
        log_with_fields(logger, 'INFO', 'Lookup completed', {
            'outcome': outcome_kind,
            'track_count': track_count,
            'duration_ms': duration_ms,
            **kwargs
        })


def log_error(logger: logging.Logger, message: str, error: Exception, **kwargs):
    """Log error with exception details."""
    log_with_fields(logger, 'ERROR', message, {
        'error_type': type(error).__name__,
        'error_message': str(error),
        **kwargs
    })
