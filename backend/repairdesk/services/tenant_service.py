# Overview: Tenant context and store-scoped entity lookups.

"""
Tenant Context

A TenantContext is built once per request from the validated session and
passed explicitly into every service operation. Services never read the
caller's identity from ambient request state.

Lookups load the row by id and then hand its store_id to the authorization
policy, so a row owned by another store is rejected by the same tenant check
as every other action and reported exactly like a missing row.
"""

from __future__ import annotations

from dataclasses import dataclass

from flask import g

from ..errors import NotFound
from ..extensions import db
from ..permissions import Action
from .concurrency import lock_for_update
from .permission_service import require


@dataclass(frozen=True)
class TenantContext:
    actor_id: int
    store_id: int
    role: str

    def to_dict(self) -> dict:
        return {"employee_id": self.actor_id, "store_id": self.store_id, "role": self.role}


def current_context() -> TenantContext:
    """Context established by @require_auth for the current request."""
    return g.tenant


def get_scoped(
    context: TenantContext,
    model,
    entity_id,
    action: Action,
    *,
    label: str,
    lock: bool = False,
):
    """
    Load `model` by id and authorize `action` against the row's store.

    Raises NotFound when the row is missing or belongs to another store and
    AuthorizationDenied when the role lacks `action`.
    """
    if entity_id is None:
        raise NotFound(f"{label} not found")

    query = db.session.query(model).filter(model.id == entity_id)
    if lock:
        query = lock_for_update(query)
    entity = query.first()

    if entity is None:
        raise NotFound(f"{label} not found")

    require(context, action, entity.store_id, resource=label)
    return entity


def find_in_store(model, entity_id, store_id: int):
    """Row with this id in this store, or None. Used for body references."""
    if entity_id is None:
        return None
    return db.session.query(model).filter(model.id == entity_id, model.store_id == store_id).first()
