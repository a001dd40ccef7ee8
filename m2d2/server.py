"""HTTP front end: style listing and markdown conversion."""

from __future__ import annotations

import os
import sys
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel

from .convert import convert_markdown
from .errors import M2D2Error
from .themes import available_styles

DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

app = FastAPI(title="m2d2", description="Markdown to styled Word documents")


@app.exception_handler(RequestValidationError)
async def invalid_request(request: Request, exc: RequestValidationError):
    fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in exc.errors())
    return JSONResponse({"error": f"Invalid request field(s): {fields}"}, status_code=400)


class ConvertRequest(BaseModel):
    markdown: Any = None
    style: Optional[str] = None
    toc: bool = False
    cover: Optional[str] = None


@app.get("/api/styles")
def list_styles():
    return [{"key": key, "name": name} for key, name in available_styles()]


@app.post("/api/convert")
def convert(req: ConvertRequest):
    if not isinstance(req.markdown, str) or not req.markdown:
        return JSONResponse({"error": "Missing or invalid 'markdown' field"}, status_code=400)
    try:
        data = convert_markdown(req.markdown, style=req.style, toc=req.toc, cover=req.cover)
    except M2D2Error as e:
        return JSONResponse({"error": str(e)}, status_code=400)
    except Exception as e:
        print(f"[Convert Error] {e}", file=sys.stderr)
        return JSONResponse({"error": str(e)}, status_code=500)
    return Response(
        content=data,
        media_type=DOCX_MEDIA_TYPE,
        headers={"Content-Disposition": 'attachment; filename="output.docx"'},
    )


def main():
    import uvicorn

    port = int(os.environ.get("PORT", "3200"))
    print(f"m2d2 running at http://localhost:{port}")
    uvicorn.run(app, host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
