# cotador/cli.py
import os

import uvicorn


def dev() -> None:
    uvicorn.run("cotador.main:app", host="0.0.0.0", port=8000, reload=True)


def start() -> None:
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run("cotador.main:app", host="0.0.0.0", port=port)
