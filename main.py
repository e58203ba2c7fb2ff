import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse

from app.config.security import SecurityConfig
from app.routers import auth, user, project, task
from app.utils.auth import resolve_current, set_session_cookie

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(title="Project Tracker API")

# Session gate: every route outside the public paths needs a valid credential,
# and each request that carries one gets a renewed 24h credential back.
@app.middleware("http")
async def session_gate(request: Request, call_next):
    if request.method == "OPTIONS" or SecurityConfig.is_public_path(request.url.path):
        return await call_next(request)

    identity = resolve_current(request)
    if identity is None:
        return RedirectResponse(url="/login", status_code=303)

    response = await call_next(request)
    # A 401 means the account behind the credential is gone
    if response.status_code != 401:
        set_session_cookie(response, identity)
    return response

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=SecurityConfig.cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Route registration
app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
app.include_router(user.router, prefix="/users", tags=["Users"])
app.include_router(project.router, prefix="/projects", tags=["Projects"])
app.include_router(task.router, tags=["Tasks"])

# Root route
@app.get("/")
def read_root():
    return {"message": "Project Tracker API"}

@app.get("/login")
def login_required():
    """Redirect target for unauthenticated requests; the login form itself lives in the client"""
    return {"detail": "Authentication required", "login_url": "/auth/login"}

@app.get("/health")
def health():
  return {"status": "ok"}

if __name__ == "__main__":
    import os
    import uvicorn
    from dotenv import load_dotenv

    load_dotenv()
    uvicorn.run(
        "main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("RELOAD", "true").lower() == "true",
        log_level="info",
    )
