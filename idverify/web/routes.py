from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse, Response
from starlette.concurrency import run_in_threadpool

from idverify.api.schemas import FieldEdit
from idverify.core.flow import FormFlow
from idverify.core.verification import VerificationProvider, get_flow_provider
from idverify.observability.logging import log
from idverify.settings import settings
from idverify.store.models import FlowSession, RegistrationDraft
from idverify.store.session_repo import load_session, save_session
from idverify.web.views import render_page

router = APIRouter(tags=["form"])


def current_session(request: Request) -> FlowSession:
    return load_session(request.cookies.get(settings.SESSION_COOKIE_NAME))


def _with_cookie(resp: Response, session: FlowSession) -> Response:
    resp.set_cookie(
        settings.SESSION_COOKIE_NAME,
        session.sessionId,
        max_age=int(settings.SESSION_IDLE_TTL_SEC) or None,
        httponly=True,
        samesite="lax",
        secure=settings.APP_ENV == "production",
    )
    return resp


def _back_to_form(session: FlowSession) -> Response:
    save_session(session)
    return _with_cookie(RedirectResponse("/", status_code=303), session)


async def _posted_edits(request: Request, flow: FormFlow) -> None:
    """Apply the draft fields carried by a submitted form before running its action."""
    form = await request.form()
    names = RegistrationDraft.field_names()
    flow.apply_edits({k: v for k, v in form.items() if k in names and isinstance(v, str)})


@router.get("/", response_class=HTMLResponse)
def form_page(session: FlowSession = Depends(current_session),
              provider: VerificationProvider = Depends(get_flow_provider)):
    flow = FormFlow(session, provider)
    save_session(session)
    return _with_cookie(HTMLResponse(render_page(flow)), session)


@router.post("/flow/identity")
async def submit_identity(request: Request,
                          session: FlowSession = Depends(current_session),
                          provider: VerificationProvider = Depends(get_flow_provider)):
    flow = FormFlow(session, provider)
    await _posted_edits(request, flow)
    await run_in_threadpool(flow.submit_identity)
    return _back_to_form(session)


@router.post("/flow/identity/resend")
async def resend_otp(request: Request,
                     session: FlowSession = Depends(current_session),
                     provider: VerificationProvider = Depends(get_flow_provider)):
    flow = FormFlow(session, provider)
    await _posted_edits(request, flow)
    flow.resend_otp()
    return _back_to_form(session)


@router.post("/flow/tax")
async def submit_tax(request: Request,
                     session: FlowSession = Depends(current_session),
                     provider: VerificationProvider = Depends(get_flow_provider)):
    flow = FormFlow(session, provider)
    await _posted_edits(request, flow)
    # The local provider sleeps to simulate verification latency
    await run_in_threadpool(flow.submit_tax)
    return _back_to_form(session)


@router.post("/flow/tax/back")
async def tax_back(request: Request,
                   session: FlowSession = Depends(current_session),
                   provider: VerificationProvider = Depends(get_flow_provider)):
    flow = FormFlow(session, provider)
    await _posted_edits(request, flow)
    flow.back()
    return _back_to_form(session)


@router.post("/flow/restart")
def restart(session: FlowSession = Depends(current_session),
            provider: VerificationProvider = Depends(get_flow_provider)):
    FormFlow(session, provider).restart()
    log(event="flow_restarted", sessionId=session.sessionId)
    return _back_to_form(session)


@router.post("/flow/dismiss-error")
async def dismiss_error(request: Request,
                        session: FlowSession = Depends(current_session),
                        provider: VerificationProvider = Depends(get_flow_provider)):
    flow = FormFlow(session, provider)
    await _posted_edits(request, flow)
    flow.dismiss_error()
    return _back_to_form(session)


@router.post("/flow/field")
def edit_field(edit: FieldEdit,
               session: FlowSession = Depends(current_session),
               provider: VerificationProvider = Depends(get_flow_provider)):
    """Live per-keystroke edit. Rejected edits leave the stored value as it was."""
    flow = FormFlow(session, provider)
    accepted = flow.edit_field(edit.name, edit.value)
    save_session(session)
    value: Optional[str] = getattr(flow.draft, edit.name, None) if edit.name in flow.draft.field_names() else None
    return _with_cookie(
        JSONResponse({"accepted": accepted, "value": value, "errors": dict(flow.errors)}),
        session,
    )


@router.get("/flow/state")
def flow_state(session: FlowSession = Depends(current_session),
               provider: VerificationProvider = Depends(get_flow_provider)):
    flow = FormFlow(session, provider)
    save_session(session)
    return _with_cookie(JSONResponse(flow.snapshot()), session)
