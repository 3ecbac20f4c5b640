"""Sessions router: login, logout, current person."""
from fastapi import APIRouter, HTTPException, Request, status

from authdir.application.identity.commands import InvalidCredentialsError
from authdir.interfaces.api.v1.schemas.identity import (
    CurrentPersonResponse,
    LoginRequest,
    PersonResponse,
    SessionResponse,
    TokenResponse,
)
from authdir.interfaces.dependencies import CurrentValidation, Facade

router = APIRouter(prefix="/sessions", tags=["sessions"])


@router.post("", response_model=TokenResponse)
async def login(body: LoginRequest, request: Request, facade: Facade):
    try:
        result = await facade.login(
            email=body.email,
            password=body.password,
            ip_address=request.client.host if request.client else None,
            user_agent=request.headers.get("user-agent"),
        )
    except InvalidCredentialsError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    return TokenResponse(token=result.token, expires_at=result.expires_at)


@router.delete("/current", status_code=status.HTTP_204_NO_CONTENT)
async def logout(validation: CurrentValidation, facade: Facade):
    await facade.logout(validation.session.token)


@router.get("/me", response_model=CurrentPersonResponse)
async def me(validation: CurrentValidation):
    person, session = validation.person, validation.session
    return CurrentPersonResponse(
        person=PersonResponse(
            id=person.id,
            email=str(person.email),
            name=person.name,
            first_name=person.first_name,
            last_name=person.last_name,
            full_name=person.full_name,
            created_at=person.created_at,
        ),
        session=SessionResponse.model_validate(session),
    )


@router.get("/me/active", response_model=list[SessionResponse])
async def my_sessions(validation: CurrentValidation, facade: Facade):
    sessions = await facade.list_person_sessions(validation.person.id)
    return [SessionResponse.model_validate(s) for s in sessions]
