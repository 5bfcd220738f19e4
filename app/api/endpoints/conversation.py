from fastapi import APIRouter, HTTPException, Depends
from app.models.conversation import ConversationAnalysis, ConversationResponse, ScreeningResults
from app.schemas.conversation_schemas import AnalyzeRequest, HealthResponse
from app.services.conversation_analyzer import analyze_conversation
from app.services.qoreai_service import (
    MissingCallIdError,
    QoreAIService,
    QoreAIServiceError,
    ScreeningNotFoundError,
)
import logging

logger = logging.getLogger(__name__)
router = APIRouter()

def get_qoreai_service():
    service = QoreAIService()
    try:
        yield service
    finally:
        service.close()

def _raise_for_service_error(e: QoreAIServiceError):
    if isinstance(e, (ScreeningNotFoundError, MissingCallIdError)):
        raise HTTPException(status_code=404, detail=str(e))
    raise HTTPException(status_code=502, detail=str(e))

@router.get("/health", response_model=HealthResponse)
async def health():
    return HealthResponse()

@router.post("/conversations/analyze", response_model=ConversationAnalysis)
async def analyze(request: AnalyzeRequest):
    """Analyze a conversation posted by the caller."""
    logger.debug(f"Analyzing {len(request.messages)} posted messages")
    return analyze_conversation(request.messages)

@router.get("/screenings/{screening_id}/conversation", response_model=ConversationResponse)
def get_screening_conversation(screening_id: str, service: QoreAIService = Depends(get_qoreai_service)):
    try:
        return service.get_conversation_messages(screening_id)
    except QoreAIServiceError as e:
        logger.error(f"Error getting conversation for screening {screening_id}: {str(e)}")
        _raise_for_service_error(e)
    except Exception as e:
        logger.error(f"Error getting conversation: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))

@router.get("/screenings/{screening_id}/analysis", response_model=ConversationAnalysis)
def get_screening_analysis(screening_id: str, service: QoreAIService = Depends(get_qoreai_service)):
    try:
        return service.analyze_screening(screening_id)
    except QoreAIServiceError as e:
        logger.error(f"Error analyzing screening {screening_id}: {str(e)}")
        _raise_for_service_error(e)
    except Exception as e:
        logger.error(f"Error analyzing screening: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))

@router.get("/screenings/{screening_id}/results", response_model=ScreeningResults)
def get_screening_results(screening_id: str, service: QoreAIService = Depends(get_qoreai_service)):
    try:
        return service.evaluate_screening(screening_id)
    except QoreAIServiceError as e:
        logger.error(f"Error scoring screening {screening_id}: {str(e)}")
        _raise_for_service_error(e)
    except Exception as e:
        logger.error(f"Error scoring screening: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))
