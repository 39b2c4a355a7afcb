# This module provides maintenance endpoints for the MCP connection storage file.
# Date: 2025-07-05
# Version: 0.1.0

from fastapi import APIRouter, Depends
from mcp_chat.api.deps import get_store
from mcp_chat.models.api_models import RestoreRequest, StatusResponse
from mcp_chat.services.connection_store import ConnectionStore

router = APIRouter()


@router.get("/stats",
            response_model=StatusResponse,
            response_model_exclude_none=True,
            summary="Storage Statistics")
def storage_stats(store: ConnectionStore = Depends(get_store)):
    return StatusResponse(data=store.stats())


@router.post("/backup",
             response_model=StatusResponse,
             response_model_exclude_none=True,
             summary="Create Backup")
def create_backup(store: ConnectionStore = Depends(get_store)):
    backup_path = store.backup()
    return StatusResponse(message="Backup created", data={"backupPath": backup_path})


@router.post("/restore",
             response_model=StatusResponse,
             response_model_exclude_none=True,
             summary="Restore From Backup")
def restore_backup(request: RestoreRequest, store: ConnectionStore = Depends(get_store)):
    restored = store.restore(request.path)
    return StatusResponse(message=f"Restored {restored} connection(s) from backup", data={"restored": restored})


@router.post("/reload",
             response_model=StatusResponse,
             response_model_exclude_none=True,
             summary="Reload Storage File")
def reload_storage(store: ConnectionStore = Depends(get_store)):
    store.reload()
    return StatusResponse(message="Storage file reloaded")


@router.delete("/clear",
               response_model=StatusResponse,
               response_model_exclude_none=True,
               summary="Clear All Connections")
def clear_storage(store: ConnectionStore = Depends(get_store)):
    store.clear()
    return StatusResponse(message="All connections cleared")
