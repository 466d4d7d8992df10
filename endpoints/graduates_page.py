from __future__ import annotations

import html
import logging

from fastapi import APIRouter, Form, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from endpoints import wiring
from endpoints.graduates_view import Failed, Loading, Notice, Ready
from errors import StoreError
from services.models import GraduateRecord, summarize
from settings import get_settings

router = APIRouter(tags=["graduates-page"])
logger = logging.getLogger(__name__)

SETTINGS = get_settings()
DEBUG_LOG_REQUESTS = SETTINGS.debug_log_requests

PAGE_TITLE = "College Alumni Management System"

STYLE = """
body { font-family: sans-serif; margin: 2rem; }
.controls form { display: inline; }
.graduates-table { border-collapse: collapse; width: 100%; margin-top: 1rem; }
.graduates-table th, .graduates-table td { border: 1px solid #ccc; padding: .4rem .6rem; text-align: left; }
.status.approved { color: #17702a; }
.status.pending { color: #9a6700; }
.store-id { color: #777; display: block; }
.notice { padding: .5rem .8rem; margin: .5rem 0; border-radius: 4px; }
.notice.success { background: #e6f4ea; }
.notice.info { background: #e8f0fe; }
.notice.warning { background: #fef7e0; }
.notice.error { background: #fce8e6; }
.notice form { display: inline; float: right; }
""".strip()


def _e(value: object) -> str:
    return html.escape("" if value is None else str(value), quote=True)


def _is_confirmed(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _log_request(request: Request) -> None:
    if DEBUG_LOG_REQUESTS:
        logger.info("GRADUATES PAGE: %s %s", request.method, request.url.path)


def _see_other(url: str = "/") -> RedirectResponse:
    return RedirectResponse(url=url, status_code=303)


def _page(body: str, *, status_code: int = 200) -> HTMLResponse:
    return HTMLResponse(
        f"""
<!doctype html>
<html>
  <head>
    <meta charset="utf-8">
    <title>{PAGE_TITLE}</title>
    <style>{STYLE}</style>
  </head>
  <body>
    <h1>{PAGE_TITLE}</h1>
    {body}
  </body>
</html>
""".strip(),
        status_code=status_code,
    )


def _render_notices(notices: list[Notice]) -> str:
    # Notices are shown once; "Dismiss" just reloads the page without them.
    return "\n".join(
        f'<div class="notice {n.kind}">{_e(n.message)}'
        f'<form method="get" action="/"><button type="submit">Dismiss</button></form></div>'
        for n in notices
    )


def _render_row(index: int, grad: GraduateRecord) -> str:
    sid = _e(grad.storeId)
    badge_class = "approved" if grad.is_approved else "pending"
    return f"""
<tr>
  <td>{index}</td>
  <td>{_e(grad.code)}</td>
  <td>{_e(grad.name)}</td>
  <td>{_e(grad.department)}</td>
  <td>{_e(grad.year)}</td>
  <td>{_e(grad.grade)}</td>
  <td><span class="status {badge_class}">{_e(grad.status_label)}</span></td>
  <td>
    <div class="actions">
      <a class="action-btn edit-btn" href="/graduates/{sid}" title="Edit">Edit</a>
      <form method="post" action="/graduates/{sid}/delete" style="display:inline">
        <input type="hidden" name="name" value="{_e(grad.name)}" />
        <button type="submit" class="action-btn delete-btn" title="Delete">Delete</button>
      </form>
    </div>
    <small class="store-id">ID: {_e(grad.short_id)}</small>
  </td>
</tr>
""".strip()


def _render_ready(state: Ready) -> str:
    migrate_label = "Migrating..." if state.migrating else "Migrate from local cache"
    migrate_disabled = " disabled" if state.migrating else ""

    if state.records:
        rows = "\n".join(_render_row(i, g) for i, g in enumerate(state.records, start=1))
    else:
        rows = '<tr><td colspan="8" class="empty-message">No data available. Use control buttons to add data.</td></tr>'

    summary = summarize(state.records)
    return f"""
<div class="table-container">
  <h2>College Graduates List</h2>
  <div class="controls">
    <form method="post" action="/refresh"><button type="submit">Refresh List</button></form>
    <form method="post" action="/migrate"><button type="submit"{migrate_disabled}>{migrate_label}</button></form>
    <form method="post" action="/initial-data"><button type="submit">Initial Data</button></form>
  </div>
  <table class="graduates-table">
    <thead>
      <tr>
        <th>#</th><th>Code</th><th>Name</th><th>Department</th><th>Year</th><th>Grade</th><th>Status</th><th>Actions</th>
      </tr>
    </thead>
    <tbody>
{rows}
    </tbody>
  </table>
  <div class="summary">
    <p>Total Graduates: <strong>{summary["total"]}</strong></p>
    <p>Status:
      <span class="approved-count">{summary["approved"]} Approved</span> |
      <span class="pending-count">{summary["underReview"]} Under Review</span>
    </p>
  </div>
</div>
""".strip()


def _render_state() -> str:
    state = wiring.GRADUATES_VIEW.state
    if isinstance(state, Loading):
        return '<div class="loading-container"><p>Loading graduate data...</p></div>'
    if isinstance(state, Failed):
        return f"""
<div class="error-container">
  <h3>Error Occurred</h3>
  <p>{_e(state.message)}</p>
  <form method="post" action="/retry"><button type="submit">Retry</button></form>
</div>
""".strip()
    return _render_ready(state)


def _confirm_page(*, question: str, action: str, fields: dict[str, str]) -> HTMLResponse:
    hidden = "\n".join(
        f'<input type="hidden" name="{_e(k)}" value="{_e(v)}" />' for k, v in fields.items()
    )
    return _page(
        f"""
<div class="confirm">
  <p>{_e(question)}</p>
  <form method="post" action="{_e(action)}">
    {hidden}
    <input type="hidden" name="confirmed" value="yes" />
    <button type="submit">OK</button>
  </form>
  <form method="get" action="/"><button type="submit">Cancel</button></form>
</div>
""".strip()
    )


@router.get("/")
async def graduates_page(request: Request) -> HTMLResponse:
    _log_request(request)
    view = wiring.GRADUATES_VIEW
    await view.mount()
    body = _render_notices(view.drain_notices()) + "\n" + _render_state()
    return _page(body)


@router.post("/refresh")
async def refresh(request: Request) -> RedirectResponse:
    _log_request(request)
    await wiring.GRADUATES_VIEW.refresh()
    return _see_other()


@router.post("/retry")
async def retry(request: Request) -> RedirectResponse:
    _log_request(request)
    await wiring.GRADUATES_VIEW.retry()
    return _see_other()


@router.post("/migrate")
async def migrate(request: Request) -> RedirectResponse:
    _log_request(request)
    await wiring.GRADUATES_VIEW.migrate()
    return _see_other()


@router.post("/initial-data", response_model=None)
async def create_initial_data(request: Request, confirmed: str = Form("")) -> HTMLResponse | RedirectResponse:
    _log_request(request)
    if not _is_confirmed(confirmed):
        return _confirm_page(
            question="Create initial data? It is saved to the local cache first, then to the document store.",
            action="/initial-data",
            fields={},
        )
    await wiring.GRADUATES_VIEW.create_initial_data(confirmed=True)
    return _see_other()


@router.post("/graduates/{store_id}/delete", response_model=None)
async def delete_graduate(
    request: Request,
    store_id: str,
    name: str = Form(""),
    confirmed: str = Form(""),
) -> HTMLResponse | RedirectResponse:
    _log_request(request)
    label = name.strip() or store_id
    if not _is_confirmed(confirmed):
        return _confirm_page(
            question=f'Delete graduate "{label}"?',
            action=f"/graduates/{store_id}/delete",
            fields={"name": label},
        )
    await wiring.GRADUATES_VIEW.delete(store_id, label, confirmed=True)
    return _see_other()


@router.get("/graduates/{store_id}")
async def graduate_detail(request: Request, store_id: str) -> HTMLResponse:
    """
    The "Edit" affordance: shows the record, changes nothing.
    """
    _log_request(request)
    try:
        grad = await wiring.GRADUATE_SERVICE.get(store_id)
    except StoreError as e:
        raise HTTPException(status_code=502, detail=str(e)) from e
    if grad is None:
        raise HTTPException(status_code=404, detail="graduate not found")

    created = grad.createdAt.isoformat() if grad.createdAt else ""
    rows = [
        ("Store ID", grad.storeId),
        ("Code", grad.code),
        ("Name", grad.name),
        ("Department", grad.department),
        ("Year", grad.year),
        ("Grade", grad.grade),
        ("Status", grad.status_label),
        ("Feedback", grad.feedback),
        ("From local cache", "yes" if grad.fromLocalCache else "no"),
        ("Created", created),
    ]
    cells = "\n".join(f"<tr><th>{_e(k)}</th><td>{_e(v)}</td></tr>" for k, v in rows)
    return _page(
        f"""
<h2>Edit: {_e(grad.name)}</h2>
<table class="graduates-table">
{cells}
</table>
<p><a href="/">Back to list</a></p>
""".strip()
    )
