
import asyncio
import json


PREVIEW_LIMIT = 2000


def format_payload(value) -> str:
    if isinstance(value, str):
        return value
    try:
        return json.dumps(value, indent=2, default=str, ensure_ascii=False)
    except (TypeError, ValueError):
        return str(value)


def truncate(text: str, limit: int = PREVIEW_LIMIT) -> str:
    return text if len(text) <= limit else text[:limit] + "…(truncated)"


def pretty_json(text: str) -> str:
    try:
        return json.dumps(json.loads(text), indent=2, ensure_ascii=False)
    except ValueError:
        return text


def emit(label: str, payload) -> None:
    print(f"[monitor] {label} {format_payload(payload)}")


async def to_serializable(handle):
    try:
        return await handle.json_value()
    except Exception:
        pass
    try:
        return await handle.evaluate("x => { try { return JSON.stringify(x); } catch (e) { return String(x); } }")
    except Exception:
        return "<unserializable>"


async def on_console(msg) -> None:
    try:
        args = [await to_serializable(a) for a in msg.args]
        emit(f"console[{msg.type}]:", {"text": msg.text, "args": args})
    except Exception:
        emit(f"console[{msg.type}]:", msg.text)


def on_page_error(err) -> None:
    emit("pageerror:", {"message": getattr(err, "message", str(err)), "stack": getattr(err, "stack", None)})


async def on_request(req) -> None:
    headers = None
    try:
        headers = await req.all_headers()
    except Exception:
        pass
    post_data = req.post_data
    emit("request:", {
        "method": req.method,
        "url": req.url,
        "headers": headers,
        "bodyPreview": truncate(post_data) if post_data else None,
    })


async def response_preview(res) -> str:
    content_type = res.headers.get("content-type", "")
    try:
        if "application/json" in content_type:
            return truncate(pretty_json(await res.text()))
        if "text/" in content_type:
            return truncate(await res.text())
    except Exception as e:
        return f"<unreadable: {e}>"
    return "<non-text content>"


async def on_response(res) -> None:
    emit("response:", {
        "status": res.status,
        "url": res.url,
        "headers": res.headers,
        "bodyPreview": await response_preview(res),
    })


def enable_monitoring(page) -> None:
    """Print console, page error, request and response traffic for ``page``."""
    page.on("console", lambda m: asyncio.create_task(on_console(m)))
    page.on("pageerror", on_page_error)
    page.on("request", lambda r: asyncio.create_task(on_request(r)))
    page.on("response", lambda r: asyncio.create_task(on_response(r)))
