"""All-or-nothing unit of work for navigation store operations.

Every mutating store call runs inside ``store_transaction``: the session is
committed once at the end, and any error rolls the whole batch back so a
reader never observes half of an operation.
"""

import logging
from collections.abc import AsyncGenerator, Iterable
from contextlib import asynccontextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from consolenav.lib import observability
from consolenav.lib.exceptions import PersistenceError, ValidationError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def store_transaction(
    db_session: AsyncSession,
    operation: str,
    keys: Iterable[str] = (),
) -> AsyncGenerator[AsyncSession, None]:
    """Run ``operation`` on the records ``keys`` as one transaction.

    Raises:
        PersistenceError: If the database rejects any statement or the commit.
            Navigation errors raised inside the block propagate unchanged after
            the rollback.
    """
    with observability.store_span(operation, keys):
        try:
            yield db_session
            await db_session.commit()
        except IntegrityError as e:
            # A unique key or route taken by a concurrent session
            await db_session.rollback()
            raise ValidationError("A record with the same key or route already exists") from e
        except SQLAlchemyError as e:
            await db_session.rollback()
            logger.warning("Navigation store operation %s failed: %s", operation, e)
            raise PersistenceError(f"Could not {operation.replace('_', ' ')}; nothing was saved") from e
        except Exception:
            await db_session.rollback()
            raise
