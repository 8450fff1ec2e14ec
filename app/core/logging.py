import logging
import sys


class ContextFormatter(logging.Formatter):
    """Custom formatter that handles optional project_id and stage fields."""
    def format(self, record):
        # Add default values for project_id and stage if not present
        if not hasattr(record, 'project_id'):
            record.project_id = '-'
        if not hasattr(record, 'stage'):
            record.stage = '-'
        return super().format(record)


def configure_logging(level: int = logging.INFO) -> None:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ContextFormatter(
        "%(asctime)s %(levelname)s %(name)s [project_id=%(project_id)s stage=%(stage)s] - %(message)s"
    ))
    logging.basicConfig(
        level=level,
        handlers=[handler],
    )
