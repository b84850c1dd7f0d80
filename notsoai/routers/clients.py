from fastapi import APIRouter, Depends, Request

from notsoai.core import errors
from notsoai.core.security import SessionCodec
from notsoai.dependencies.auth import get_data_access, get_session_codec
from notsoai.services.access import enforce_client_access

router = APIRouter(prefix="/api/clients", tags=["Clients"])


@router.get("/{slug}")
def get_client(
    slug: str,
    request: Request,
    codec: SessionCodec = Depends(get_session_codec),
    data=Depends(get_data_access),
):
    access = enforce_client_access(request, slug, codec, data.clients)
    if not access.allowed:
        return access.response

    client = data.clients.get_by_id_or_slug(access.session.client_id)
    if client is None:
        return errors.not_found("CLIENT_NOT_FOUND", f'Client "{slug}" not found')

    return {"data": client}
