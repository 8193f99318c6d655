"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Request

from coop_gateway.infrastructure.database.store import DocumentStore
from coop_gateway.services.gateway import CollectionGateway
from coop_gateway.services.transfer import LedgerTransferEngine


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_store(request: Request) -> DocumentStore:
    """Provide the process-wide document store created by the app factory"""
    return request.app.state.store


def get_gateway(store: DocumentStore = Depends(get_store)) -> CollectionGateway:
    """Provide generic CRUD gateway bound to the shared store"""
    return CollectionGateway(store)


def get_transfer_engine(store: DocumentStore = Depends(get_store)) -> LedgerTransferEngine:
    """Provide ledger transfer engine bound to the shared store"""
    return LedgerTransferEngine(store)
