#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Transaction Management Module

Every write of a migration pass commits on its own; there is no transaction
spanning rows. A failure leaves earlier writes in place and aborts the pass.

Usage:
    with transaction(dry_run=False):
        db.session.execute(stmt)
        # commit happens automatically on success, rollback on error
"""

import logging
from contextlib import contextmanager

from link_migrator import db

logger = logging.getLogger(__name__)


@contextmanager
def transaction(dry_run: bool = False):
    """
    Context manager for database transactions.

    Commits on success, rolls back on exception. With `dry_run` the work done
    inside the block is always rolled back.
    """
    try:
        yield
        if dry_run:
            db.session.rollback()
        else:
            db.session.commit()
    except Exception as e:
        db.session.rollback()
        logger.error("Transaction rolled back: %s", str(e))
        raise


__all__ = ["transaction"]
