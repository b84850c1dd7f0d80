from fastapi import APIRouter, Depends

from notsoai.core.session import Role, Session
from notsoai.dependencies.auth import get_data_access, require_role

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.get("")
def list_users(
    session: Session = Depends(require_role(Role.ADMIN)),
    data=Depends(get_data_access),
):
    # team members of the caller's own tenant only
    return {"data": data.users.list_by_client(session.client_id)}
