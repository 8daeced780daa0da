import logging
import sys

from postshelf.dependencies import get_posts_service
from postshelf.errors import DuplicateSlug
from postshelf.settings import settings

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper()),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def main() -> int:
    service = get_posts_service()
    try:
        report = service.check_all()
    except DuplicateSlug as e:
        logger.error(str(e))
        return 1

    failed = 0
    for slug, violations in sorted(report.items()):
        for violation in violations:
            field = violation.field or "front-matter"
            logger.error(f"{slug}: {field}: {violation.message}")
        if violations:
            failed += 1

    logger.info(f"Checked {len(report)} post(s), {failed} with violations.")
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
