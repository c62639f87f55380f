"""
Tenant-scoped base repository for the data access layer.

Every query issued through a repository is filtered by the caller's tenant,
and every row it writes is stamped with it. There is no way to pass a tenant
id in from outside: it always comes from the TenantContext.
"""

from typing import Any, Generic, TypeVar, Optional, List, Type
from sqlalchemy import select
from sqlalchemy.orm import Session
from abc import ABC

from app.exceptions import NotFoundError, TenantMismatchError
from domain.tenant_context import TenantContext

ModelType = TypeVar("ModelType")

TENANT_FIELD = "tenant_id"


class TenantScopedRepository(Generic[ModelType], ABC):
    """
    Base repository providing tenant-filtered find/create/update.
    All repositories over tenant-owned tables inherit from this class.
    """

    not_found_message = "Resource not found"

    def __init__(self, db: Session, model: Type[ModelType]):
        self.db = db
        self.model = model

    # ------------------------------------------------------------------
    # Tenant handling
    # ------------------------------------------------------------------

    def _scoped(self, ctx: TenantContext, values: dict) -> dict:
        """Merge the context tenant into ``values``; reject a conflicting one."""
        tenant_id = ctx.require_tenant()
        supplied = values.get(TENANT_FIELD)
        if supplied is not None and str(supplied) != str(tenant_id):
            raise TenantMismatchError(details={"field": TENANT_FIELD})
        scoped = dict(values)
        scoped[TENANT_FIELD] = tenant_id
        return scoped

    def _query(self, ctx: TenantContext, filters: dict):
        stmt = select(self.model)
        for key, value in self._scoped(ctx, filters).items():
            stmt = stmt.where(getattr(self.model, key) == value)
        return stmt

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def find(
        self,
        ctx: TenantContext,
        order_by: Optional[list] = None,
        limit: Optional[int] = None,
        **filters: Any,
    ) -> List[ModelType]:
        """Return all rows in the caller's tenant matching ``filters``"""
        stmt = self._query(ctx, filters)
        if order_by:
            stmt = stmt.order_by(*order_by)
        if limit is not None:
            stmt = stmt.limit(limit)
        return list(self.db.scalars(stmt).all())

    def find_one(self, ctx: TenantContext, **filters: Any) -> Optional[ModelType]:
        """Return one row in the caller's tenant matching ``filters``, or None"""
        return self.db.scalars(self._query(ctx, filters).limit(1)).first()

    def get_or_404(self, ctx: TenantContext, **filters: Any) -> ModelType:
        """
        Like find_one() but raises NotFoundError.

        A row in another tenant and a row that does not exist at all produce
        the same error.
        """
        entity = self.find_one(ctx, **filters)
        if entity is None:
            raise NotFoundError(self.not_found_message)
        return entity

    # ------------------------------------------------------------------
    # Writes (flush only; the calling service owns the transaction)
    # ------------------------------------------------------------------

    def create(self, ctx: TenantContext, **payload: Any) -> ModelType:
        """Create a row stamped with the caller's tenant"""
        entity = self.model(**self._scoped(ctx, payload))
        self.db.add(entity)
        self.db.flush()
        return entity

    def update(self, ctx: TenantContext, changes: dict, **filters: Any) -> ModelType:
        """
        Apply ``changes`` to the single row matching ``filters`` in the
        caller's tenant. ``changes`` may not move a row to another tenant.
        """
        if TENANT_FIELD in changes:
            self._scoped(ctx, {TENANT_FIELD: changes[TENANT_FIELD]})
            changes = {k: v for k, v in changes.items() if k != TENANT_FIELD}
        entity = self.get_or_404(ctx, **filters)
        for key, value in changes.items():
            setattr(entity, key, value)
        self.db.flush()
        return entity

    # ------------------------------------------------------------------
    # Transaction control
    # ------------------------------------------------------------------

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
