from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response

from shopmate.api.v1.schemas import ImageRequestSchema, SendMessageSchema, SessionSchema
from shopmate.application.exceptions import CatalogError, SessionNotFoundError
from shopmate.application.use_cases.session_controller import SessionControllerUseCase
from shopmate.wiring.dependencies import get_session_controller

router = APIRouter(prefix="/sessions")


@router.post("", response_model=SessionSchema, status_code=201)
def start_session(sessions: SessionControllerUseCase = Depends(get_session_controller)):
    return SessionSchema.from_state(sessions.start())


@router.get("/{token}", response_model=SessionSchema)
def resume_session(token: str, sessions: SessionControllerUseCase = Depends(get_session_controller)):
    try:
        return SessionSchema.from_state(sessions.resume(token))
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except CatalogError as e:
        raise HTTPException(status_code=502, detail=str(e))


@router.post("/{token}/image", response_model=SessionSchema)
def upload_image(
    token: str,
    req: ImageRequestSchema,
    sessions: SessionControllerUseCase = Depends(get_session_controller),
):
    try:
        image, mime = req.decode()
        return SessionSchema.from_state(sessions.upload_image(token, image, mime))
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/{token}/messages", response_model=SessionSchema)
def send_message(
    token: str,
    req: SendMessageSchema,
    sessions: SessionControllerUseCase = Depends(get_session_controller),
):
    try:
        return SessionSchema.from_state(sessions.send_message(token, req.text))
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/{token}/order", response_model=SessionSchema)
def place_order(token: str, sessions: SessionControllerUseCase = Depends(get_session_controller)):
    try:
        return SessionSchema.from_state(sessions.place_order(token))
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/{token}", status_code=204)
def reset_session(token: str, sessions: SessionControllerUseCase = Depends(get_session_controller)) -> Response:
    sessions.reset(token)
    return Response(status_code=204)
