"""Mock Robot web service — FastAPI application factory.

Mirrors the Robot API surface used by the client over HTTP Basic auth,
backed by an in-memory ``MockAccount`` per user. Request bodies are
form-encoded like the real service; every failure is rendered as
``{"error": {"status", "code", "message"}}``.
"""

import copy
import hmac
import logging
import secrets
from contextlib import asynccontextmanager
from typing import Any

from fastapi import APIRouter, Depends, FastAPI, Request, Response, Security
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from starlette.exceptions import HTTPException as StarletteHTTPException

from robot_api.logging.request_log import setup_logging
from robot_api.mock.database import (
    BOOT_SYSTEMS,
    MockAccount,
    MockApiError,
    fingerprint_for,
    seed_account,
)

logger = logging.getLogger("robot_api.mock")

RESET_TYPES = ("sw", "hw", "man")
TRAFFIC_TYPES = ("day", "month", "year")
VSERVER_COMMANDS = ("start", "stop", "shutdown")
BOOT_REQUIRED_FIELDS = {
    "rescue": ("os",),
    "linux": ("dist",),
    "vnc": ("dist",),
    "windows": (),
    "plesk": ("dist", "hostname"),
    "cpanel": ("dist", "hostname"),
}
BOOT_LAST_SYSTEMS = ("rescue", "linux")

STATUS_CODES = {
    401: "UNAUTHORIZED",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
}

basic_auth = HTTPBasic(auto_error=False)
router = APIRouter()


# --- auth and request helpers ---

async def get_account(
    request: Request,
    credentials: HTTPBasicCredentials | None = Security(basic_auth),
) -> MockAccount:
    """FastAPI dependency: authenticate and return the caller's account."""
    if credentials is None:
        raise MockApiError(401, "UNAUTHORIZED", "Unauthorized")

    username, password = request.app.state.credentials
    user_ok = hmac.compare_digest(credentials.username.encode(), username.encode())
    password_ok = hmac.compare_digest(credentials.password.encode(), password.encode())
    if not (user_ok and password_ok):
        raise MockApiError(401, "UNAUTHORIZED", "Unauthorized")

    accounts: dict[str, MockAccount] = request.app.state.accounts
    if credentials.username not in accounts:
        accounts[credentials.username] = seed_account()
    return accounts[credentials.username]


async def read_form(request: Request) -> dict[str, Any]:
    """Form body as a dict; ``name[]`` keys are collected into lists."""
    form = await request.form()
    fields: dict[str, Any] = {}
    for key, value in form.multi_items():
        if key.endswith("[]"):
            fields.setdefault(key[:-2], []).append(value)
        else:
            fields[key] = value
    return fields


def _invalid_input() -> MockApiError:
    return MockApiError(400, "INVALID_INPUT", "Invalid input parameters")


def _require(fields: dict[str, Any], name: str) -> str:
    value = fields.get(name)
    if not isinstance(value, str) or not value:
        raise _invalid_input()
    return value


def _as_int(value: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise _invalid_input()


def _as_bool(value: str) -> bool:
    if value not in ("true", "false"):
        raise _invalid_input()
    return value == "true"


def _empty() -> Response:
    return Response(status_code=200)


# --- servers ---

@router.get("/server")
async def list_servers(account: MockAccount = Depends(get_account)):
    if not account.servers:
        raise MockApiError(404, "NOT_FOUND", "No server found")
    return [{"server": server} for server in account.servers]


@router.get("/server/{ip}")
async def query_server(ip: str, account: MockAccount = Depends(get_account)):
    return {"server": account.find_server(ip)}


@router.post("/server/{ip}")
async def update_server_name(ip: str, request: Request, account: MockAccount = Depends(get_account)):
    fields = await read_form(request)
    name = _require(fields, "server_name")
    server = account.find_server(ip)
    server["server_name"] = name
    return {"server": server}


def _cancellation(account: MockAccount, server: dict) -> dict:
    stored = account.cancellations.get(server["server_ip"], {})
    return {
        "server_ip": server["server_ip"],
        "server_number": server["server_number"],
        "server_name": server["server_name"],
        "earliest_cancellation_date": "2099-10-10",
        "cancelled": server["cancelled"],
        "cancellation_date": stored.get("cancellation_date"),
        "cancellation_reason": stored.get("cancellation_reason"),
    }


@router.get("/server/{ip}/cancellation")
async def query_cancellation(ip: str, account: MockAccount = Depends(get_account)):
    return {"cancellation": _cancellation(account, account.find_server(ip))}


@router.post("/server/{ip}/cancellation")
async def cancel_server(ip: str, request: Request, account: MockAccount = Depends(get_account)):
    fields = await read_form(request)
    date = _require(fields, "cancellation_date")
    server = account.find_server(ip)
    server["cancelled"] = True
    account.cancellations[ip] = {
        "cancellation_date": date,
        "cancellation_reason": fields.get("cancellation_reason"),
    }
    return {"cancellation": _cancellation(account, server)}


@router.delete("/server/{ip}/cancellation")
async def revoke_cancellation(ip: str, account: MockAccount = Depends(get_account)):
    server = account.find_server(ip)
    if not server["cancelled"]:
        raise MockApiError(409, "CONFLICT", f"Server with IP {ip} is not cancelled")
    server["cancelled"] = False
    account.cancellations.pop(ip, None)
    return _empty()


# --- IPs ---

@router.get("/ip")
async def list_ips(server_ip: str | None = None, account: MockAccount = Depends(get_account)):
    entries = [e for e in account.ips if server_ip is None or e["server_ip"] == server_ip]
    if not entries:
        raise MockApiError(404, "NOT_FOUND", "No IP found")
    return [{"ip": entry} for entry in entries]


@router.get("/ip/{ip}")
async def query_ip(ip: str, account: MockAccount = Depends(get_account)):
    return {"ip": account.find_ip(ip)}


@router.post("/ip/{ip}")
async def update_traffic_warnings(ip: str, request: Request, account: MockAccount = Depends(get_account)):
    fields = await read_form(request)
    warnings = _as_bool(_require(fields, "traffic_warnings"))
    hourly = _as_int(_require(fields, "traffic_hourly"))
    daily = _as_int(_require(fields, "traffic_daily"))
    monthly = _as_int(_require(fields, "traffic_monthly"))

    entry = account.find_ip(ip)
    entry.update(
        traffic_warnings=warnings,
        traffic_hourly=hourly,
        traffic_daily=daily,
        traffic_monthly=monthly,
    )
    return {"ip": entry}


# --- reset / wake on LAN ---

def _reset(server: dict) -> dict:
    return {
        "server_ip": server["server_ip"],
        "server_number": server["server_number"],
        "type": list(RESET_TYPES),
        "operating_status": "not supported",
    }


@router.get("/reset")
async def list_resets(account: MockAccount = Depends(get_account)):
    if not account.servers:
        raise MockApiError(404, "NOT_FOUND", "No server found")
    return [{"reset": _reset(server)} for server in account.servers]


@router.get("/reset/{ip}")
async def query_reset(ip: str, account: MockAccount = Depends(get_account)):
    return {"reset": _reset(account.find_server(ip))}


@router.post("/reset/{ip}")
async def reset_server(ip: str, request: Request, account: MockAccount = Depends(get_account)):
    fields = await read_form(request)
    reset_type = _require(fields, "type")
    if reset_type not in RESET_TYPES:
        raise _invalid_input()
    server = account.find_server(ip)
    return {"reset": {"server_ip": server["server_ip"], "type": reset_type}}


@router.get("/wol/{ip}")
async def query_wol(ip: str, account: MockAccount = Depends(get_account)):
    server = account.find_server(ip)
    return {"wol": {"server_ip": server["server_ip"], "server_number": server["server_number"]}}


@router.post("/wol/{ip}")
async def send_wol(ip: str, account: MockAccount = Depends(get_account)):
    server = account.find_server(ip)
    return {"wol": {"server_ip": server["server_ip"], "server_number": server["server_number"]}}


# --- boot configuration ---

def _boot_system(system: str) -> str:
    if system not in BOOT_SYSTEMS:
        raise MockApiError(404, "NOT_FOUND", "Not Found")
    return system


@router.get("/boot/{ip}")
async def query_boot_config(ip: str, account: MockAccount = Depends(get_account)):
    return {"boot": account.boot_config(ip)}


@router.get("/boot/{ip}/{system}")
async def query_boot_system(ip: str, system: str, account: MockAccount = Depends(get_account)):
    system = _boot_system(system)
    return {system: account.boot_config(ip)[system]}


@router.post("/boot/{ip}/{system}")
async def enable_boot_system(
    ip: str, system: str, request: Request, account: MockAccount = Depends(get_account)
):
    system = _boot_system(system)
    config = account.boot_config(ip)
    if config[system]["active"]:
        raise MockApiError(409, "BOOT_ALREADY_ENABLED", f"The {system} system is already active")

    fields = await read_form(request)
    for name in BOOT_REQUIRED_FIELDS[system]:
        _require(fields, name)

    activated = {
        "server_ip": config[system]["server_ip"],
        "server_number": config[system]["server_number"],
        "active": True,
        "password": secrets.token_urlsafe(9),
    }
    for name in ("os", "dist", "lang", "hostname"):
        if name in fields:
            activated[name] = fields[name]
    if "arch" in fields:
        activated["arch"] = _as_int(fields["arch"])
    if system in ("rescue", "linux"):
        keys = fields.get("authorized_key", [])
        activated["authorized_key"] = keys if isinstance(keys, list) else [keys]

    config[system] = activated
    if system in BOOT_LAST_SYSTEMS:
        account.last_boot[(ip, system)] = copy.deepcopy(activated)
    return {system: activated}


@router.delete("/boot/{ip}/{system}")
async def disable_boot_system(ip: str, system: str, account: MockAccount = Depends(get_account)):
    system = _boot_system(system)
    return {system: account.reset_boot(ip, system)}


@router.get("/boot/{ip}/{system}/last")
async def query_last_boot(ip: str, system: str, account: MockAccount = Depends(get_account)):
    if system not in BOOT_LAST_SYSTEMS:
        raise MockApiError(404, "NOT_FOUND", "Not Found")
    account.find_server(ip)
    last = account.last_boot.get((ip, system))
    if last is None:
        raise MockApiError(404, "NOT_FOUND", f"No previous {system} activation found")
    return {system: last}


# --- reverse DNS ---

@router.get("/rdns")
async def list_rdns(account: MockAccount = Depends(get_account)):
    if not account.rdns:
        raise MockApiError(404, "NOT_FOUND", "No reverse DNS entries found")
    return [{"rdns": {"ip": ip, "ptr": ptr}} for ip, ptr in account.rdns.items()]


@router.get("/rdns/{ip}")
async def query_rdns(ip: str, account: MockAccount = Depends(get_account)):
    if ip not in account.rdns:
        raise MockApiError(404, "NOT_FOUND", f"No reverse DNS entry for {ip}")
    return {"rdns": {"ip": ip, "ptr": account.rdns[ip]}}


@router.put("/rdns/{ip}", status_code=201)
async def create_rdns(ip: str, request: Request, account: MockAccount = Depends(get_account)):
    fields = await read_form(request)
    ptr = _require(fields, "ptr")
    account.find_ip(ip)
    if ip in account.rdns:
        raise MockApiError(409, "RDNS_ALREADY_EXISTS", f"Reverse DNS entry for {ip} already exists")
    account.rdns[ip] = ptr
    return {"rdns": {"ip": ip, "ptr": ptr}}


@router.post("/rdns/{ip}")
async def update_rdns(ip: str, request: Request, account: MockAccount = Depends(get_account)):
    fields = await read_form(request)
    ptr = _require(fields, "ptr")
    account.find_ip(ip)
    account.rdns[ip] = ptr
    return {"rdns": {"ip": ip, "ptr": ptr}}


@router.delete("/rdns/{ip}")
async def delete_rdns(ip: str, account: MockAccount = Depends(get_account)):
    if account.rdns.pop(ip, None) is None:
        raise MockApiError(404, "NOT_FOUND", f"No reverse DNS entry for {ip}")
    return _empty()


# --- traffic ---

@router.post("/traffic")
async def query_traffic(request: Request, account: MockAccount = Depends(get_account)):
    fields = await read_form(request)
    traffic_type = _require(fields, "type")
    if traffic_type not in TRAFFIC_TYPES:
        raise _invalid_input()
    ips = fields.get("ip", [])
    subnets = fields.get("subnet", [])
    return {
        "traffic": {
            "type": traffic_type,
            "from": _require(fields, "from"),
            "to": _require(fields, "to"),
            "data": {
                address: {"in": 0.0, "out": 0.0, "sum": 0.0}
                for address in [*ips, *subnets]
            },
        }
    }


# --- SSH keys ---

@router.get("/key")
async def list_keys(account: MockAccount = Depends(get_account)):
    if not account.ssh_keys:
        raise MockApiError(404, "NOT_FOUND", "No keys found")
    return [{"key": key} for key in account.ssh_keys]


@router.post("/key", status_code=201)
async def create_key(request: Request, account: MockAccount = Depends(get_account)):
    fields = await read_form(request)
    name = _require(fields, "name")
    data = _require(fields, "data")
    fingerprint = fingerprint_for(data)
    if any(k["fingerprint"] == fingerprint for k in account.ssh_keys):
        raise MockApiError(409, "KEY_ALREADY_EXISTS", "The key already exists")
    key = {
        "name": name,
        "fingerprint": fingerprint,
        "type": data.split()[0],
        "size": 0,
        "data": data,
    }
    account.ssh_keys.append(key)
    return {"key": key}


@router.get("/key/{fingerprint}")
async def query_key(fingerprint: str, account: MockAccount = Depends(get_account)):
    return {"key": account.find_key(fingerprint)}


@router.post("/key/{fingerprint}")
async def update_key_name(fingerprint: str, request: Request, account: MockAccount = Depends(get_account)):
    fields = await read_form(request)
    name = _require(fields, "name")
    key = account.find_key(fingerprint)
    key["name"] = name
    return {"key": key}


@router.delete("/key/{fingerprint}")
async def delete_key(fingerprint: str, account: MockAccount = Depends(get_account)):
    account.delete_key(fingerprint)
    return _empty()


# --- storage boxes ---

@router.get("/storagebox")
async def list_storage_boxes(account: MockAccount = Depends(get_account)):
    if not account.storage_boxes:
        raise MockApiError(404, "NOT_FOUND", "No storagebox found")
    return [{"storagebox": box} for box in account.storage_boxes]


@router.get("/storagebox/{storagebox_id}")
async def query_storage_box(storagebox_id: int, account: MockAccount = Depends(get_account)):
    return {"storagebox": account.find_storage_box(storagebox_id)}


@router.post("/storagebox/{storagebox_id}")
async def update_storage_box_name(
    storagebox_id: int, request: Request, account: MockAccount = Depends(get_account)
):
    fields = await read_form(request)
    name = _require(fields, "storagebox_name")
    box = account.find_storage_box(storagebox_id)
    box["name"] = name
    return {"storagebox": box}


@router.get("/storagebox/{storagebox_id}/snapshot")
async def list_snapshots(storagebox_id: int, account: MockAccount = Depends(get_account)):
    account.find_storage_box(storagebox_id)
    return [{"snapshot": s} for s in account.snapshots.get(storagebox_id, [])]


@router.post("/storagebox/{storagebox_id}/snapshot", status_code=201)
async def create_snapshot(storagebox_id: int, account: MockAccount = Depends(get_account)):
    return {"snapshot": account.create_snapshot(storagebox_id)}


@router.delete("/storagebox/{storagebox_id}/snapshot/{name}")
async def delete_snapshot(storagebox_id: int, name: str, account: MockAccount = Depends(get_account)):
    snapshot = account.find_snapshot(storagebox_id, name)
    account.snapshots[storagebox_id].remove(snapshot)
    return _empty()


@router.post("/storagebox/{storagebox_id}/snapshot/{name}")
async def revert_snapshot(
    storagebox_id: int, name: str, request: Request, account: MockAccount = Depends(get_account)
):
    fields = await read_form(request)
    if fields.get("revert") != "true":
        raise _invalid_input()
    account.find_snapshot(storagebox_id, name)
    return _empty()


# --- virtual servers ---

@router.post("/vserver/{ip}/command")
async def vserver_command(ip: str, request: Request, account: MockAccount = Depends(get_account)):
    fields = await read_form(request)
    command = _require(fields, "type")
    if command not in VSERVER_COMMANDS:
        raise _invalid_input()

    vserver = account.find_vserver(ip)
    should_be_online = command != "start"
    if vserver["online"] != should_be_online:
        raise MockApiError(500, "INTERNAL_ERROR", "Command failed due to an internal error")

    vserver["online"] = command == "start"
    return _empty()


# --- application ---

def _error_response(status: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status,
        content={"error": {"status": status, "code": code, "message": message}},
    )


async def _mock_api_error_handler(request: Request, exc: MockApiError) -> JSONResponse:
    logger.info(
        "Mock API error",
        extra={"request_data": {
            "method": request.method,
            "path": request.url.path,
            "status_code": exc.status,
            "code": exc.code,
        }},
    )
    return _error_response(exc.status, exc.code, exc.message)


async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = STATUS_CODES.get(exc.status_code, "INTERNAL_ERROR")
    return _error_response(exc.status_code, code, str(exc.detail))


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _error_response(400, "INVALID_INPUT", "Invalid input parameters")


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger.info("Mock Robot API started")
    yield
    logger.info("Mock Robot API stopped")


def create_app(
    username: str = "test",
    password: str = "test",
    accounts: dict[str, MockAccount] | None = None,
) -> FastAPI:
    """Build a mock Robot service accepting one username/password pair.

    Args:
        username: Accepted Basic auth username.
        password: Accepted Basic auth password.
        accounts: Pre-built account data keyed by username. Accounts are
            seeded on first access when absent.
    """
    app = FastAPI(
        title="Mock Robot API",
        description="In-memory stand-in for the Robot web service",
        lifespan=lifespan,
    )
    app.state.credentials = (username, password)
    app.state.accounts = accounts if accounts is not None else {}

    app.include_router(router)
    app.add_exception_handler(MockApiError, _mock_api_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    return app
