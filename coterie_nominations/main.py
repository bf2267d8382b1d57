from fastapi import FastAPI, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import os
import logging
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Configure logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

from . import __version__
from .models import NominationSubmission
from .validation import SubmissionValidationError, validate_submission
from .dispatcher import DispatchError, NotificationDispatcher, get_dispatcher
from .transport import TransportConfig

# Configuration settings
SERVICE_NAME = "The Coterie Nomination API"
VALIDATE_SUBMISSIONS = os.getenv("VALIDATE_SUBMISSIONS", "true").lower() == "true"
CORS_ALLOW_ORIGINS = [o.strip() for o in os.getenv("CORS_ALLOW_ORIGINS", "*").split(",") if o.strip()]

SUCCESS_MESSAGE = "Nomination submitted successfully."
VALIDATION_MESSAGE = "Please fill out all required fields."
SERVER_ERROR_MESSAGE = "An internal server error occurred."

app = FastAPI(
    title=SERVICE_NAME,
    description="Accept nomination form submissions for The Coterie and send notification emails",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc"
)

# Add CORS middleware so the nomination form can post from its own origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOW_ORIGINS,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Report unparseable bodies the same way as missing fields"""
    logger.warning(f"Rejected malformed request to {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=400, content={"message": VALIDATION_MESSAGE})


@app.get("/")
async def root():
    """Root endpoint with basic status information"""
    return {
        "status": "healthy",
        "service": SERVICE_NAME,
        "message": "This server is running and ready to receive POST requests at the /submit endpoint."
    }


@app.get("/wake-up")
async def wake_up():
    """Wake-up endpoint for hosts that idle the service between requests"""
    return {"message": "Server is awake and ready."}


@app.get("/health")
async def health_check():
    """Health check endpoint reporting transport configuration"""
    config = TransportConfig()
    is_valid, error_msg = config.validate_config()

    return {
        "status": "healthy",
        "service": SERVICE_NAME,
        "version": __version__,
        "transport": {
            "backend": config.selected_backend,
            "status": "configured" if is_valid else f"not configured: {error_msg}"
        },
        "config": {
            "validate_submissions": VALIDATE_SUBMISSIONS
        }
    }


@app.post("/submit")
async def submit_nomination(
    submission: NominationSubmission,
    dispatcher: NotificationDispatcher = Depends(get_dispatcher)
):
    """
    Submit a nomination

    Validates the form (unless VALIDATE_SUBMISSIONS is off), then sends the
    admin notice and the acknowledgment emails as one concurrent batch.

    - **nominationType**: "self" or "peer"
    - **name, email, title, company, linkedin, community, qualification**: nominee details
    - **nominatorName, nominatorEmail**: required for peer nominations

    Returns: JSON `{message}`; 400 when required fields are missing, 500 when
    any email fails to send.
    """
    try:
        if VALIDATE_SUBMISSIONS:
            validate_submission(submission)
    except SubmissionValidationError as e:
        logger.info(f"Rejected nomination: {e}")
        return JSONResponse(status_code=400, content={"message": VALIDATION_MESSAGE})

    try:
        await dispatcher.dispatch(submission)
    except DispatchError as e:
        logger.error(f"Nomination emails failed for {submission.name!r}: {e}")
        return JSONResponse(status_code=500, content={"message": SERVER_ERROR_MESSAGE})
    except Exception as e:
        # Log the full error for debugging while returning safe message to user
        logger.exception(f"Unexpected error in submit_nomination: {e}")
        return JSONResponse(status_code=500, content={"message": SERVER_ERROR_MESSAGE})

    logger.info(f"Nomination ({submission.nomination_type}) submitted for {submission.name!r}")
    return {"message": SUCCESS_MESSAGE}


# Production runner
if __name__ == "__main__":
    import uvicorn

    # Configuration from environment variables
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "3000"))
    reload = os.getenv("RELOAD", "false").lower() == "true"

    logger.info(f"Starting {SERVICE_NAME} on {host}:{port}")

    uvicorn.run(
        "coterie_nominations.main:app",
        host=host,
        port=port,
        reload=reload,
        access_log=True,
        log_level="info"
    )
