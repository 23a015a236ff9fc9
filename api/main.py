"""FastAPI server for the study assistant."""
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, File, Form, Header, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ValidationError

from studybuddy.assistant import assistant
from studybuddy.config import config
from studybuddy.date_resolver import local_today
from studybuddy.errors import PersistenceError, UnsupportedFileError
from studybuddy.file_processor import file_processor
from studybuddy.memory import chat_history
from studybuddy.models import (
    ClarificationNeeded,
    Priority,
    ScheduleItem,
    ScheduleType,
    StudyPlanRequest,
    StudySession,
    Task,
)
from studybuddy.storage import store

# Configure logging
logging.basicConfig(level=config.log_level)
logger = logging.getLogger(__name__)

# Request models
class ChatRequest(BaseModel):
    message: str
    full_name: Optional[str] = None

class ScheduleRequest(BaseModel):
    subject: str
    time_slot: str
    day_of_week: str
    room: Optional[str] = None
    type: ScheduleType = "class"
    notifications: bool = True

class TaskRequest(BaseModel):
    title: str
    subject: Optional[str] = None
    due_date: Optional[str] = None
    priority: Priority = "medium"
    estimated_hours: float = 1.0

class StudySessionRequest(BaseModel):
    subject: str
    duration_minutes: int
    session_date: Optional[str] = None
    notes: Optional[str] = None

class NoteRequest(BaseModel):
    title: str
    text: str

# Dependency to get current user
async def get_user_id(x_user_id: Optional[str] = Header(None)) -> str:
    """Caller identity, established by whatever authenticates in front of this API."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Missing X-User-ID header")
    return x_user_id.strip()

# Startup/shutdown
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle startup and shutdown."""
    logger.info("Study assistant starting up...")

    await asyncio.gather(
        assistant.get_status(),
        return_exceptions=True
    )

    logger.info("Study assistant ready")
    yield

    logger.info("Study assistant shutting down...")

# Create app
app = FastAPI(
    title="StudyBuddy",
    description="Study assistant: schedules, tasks, notes, study sessions and exam plans from chat",
    version="1.0.0",
    lifespan=lifespan
)

# CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

def _build(model, **fields):
    """Validate a record from request fields, 422 on bad values."""
    try:
        return model(**fields)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))

@app.get("/")
async def root():
    """Health check."""
    return {"status": "ready", "message": "StudyBuddy"}

@app.get("/status")
async def get_status():
    """Get system status."""
    return await assistant.get_status()

@app.post("/chat")
async def chat(request: ChatRequest, user_id: str = Depends(get_user_id)):
    """Main chat endpoint."""
    try:
        result = await assistant.handle_message(request.message, user_id, local_today(), request.full_name)
        return result.model_dump(mode="json", by_alias=True)
    except Exception as e:
        logger.error(f"Chat error: {e}")
        raise HTTPException(status_code=500, detail=str(e))

@app.get("/chat/history")
async def get_chat_history(limit: int = 50, user_id: str = Depends(get_user_id)):
    """Newest exchanges first."""
    history = await chat_history.get_history(user_id, limit=limit)
    return {"messages": [exchange.model_dump() for exchange in history]}

@app.post("/chat/clear")
async def clear_chat(user_id: str = Depends(get_user_id)):
    await chat_history.clear(user_id)
    return {"status": "cleared"}

@app.get("/schedule")
async def get_schedule(user_id: str = Depends(get_user_id)):
    items = await store.list_schedule(user_id)
    return {"schedule": [item.model_dump() for item in items]}

@app.post("/schedule")
async def add_schedule_item(request: ScheduleRequest, user_id: str = Depends(get_user_id)):
    item = _build(ScheduleItem, **request.model_dump())
    try:
        return await store.create_schedule_item(user_id, item)
    except PersistenceError as e:
        logger.error(f"Schedule create error: {e}")
        raise HTTPException(status_code=500, detail=str(e))

@app.get("/tasks")
async def get_tasks(user_id: str = Depends(get_user_id)):
    tasks = await store.list_tasks(user_id)
    return {"tasks": [task.model_dump() for task in tasks]}

@app.post("/tasks")
async def add_task(request: TaskRequest, user_id: str = Depends(get_user_id)):
    task = _build(Task, **request.model_dump())
    try:
        return await store.create_task(user_id, task)
    except PersistenceError as e:
        logger.error(f"Task create error: {e}")
        raise HTTPException(status_code=500, detail=str(e))

@app.post("/tasks/{task_id}/toggle")
async def toggle_task(task_id: str, user_id: str = Depends(get_user_id)):
    task = await store.toggle_task(user_id, task_id)
    if task is None:
        raise HTTPException(status_code=404, detail="Task not found")
    return task

@app.get("/study-sessions")
async def get_study_sessions(user_id: str = Depends(get_user_id)):
    sessions = await store.list_study_sessions(user_id)
    return {
        "sessions": [session.model_dump() for session in sessions],
        "total_minutes": sum(session.duration_minutes for session in sessions)
    }

@app.post("/study-sessions")
async def add_study_session(request: StudySessionRequest, user_id: str = Depends(get_user_id)):
    fields = request.model_dump()
    fields["session_date"] = fields["session_date"] or local_today().isoformat()
    session = _build(StudySession, **fields)
    try:
        return await store.create_study_session(user_id, session)
    except PersistenceError as e:
        logger.error(f"Study session create error: {e}")
        raise HTTPException(status_code=500, detail=str(e))

@app.get("/study-plan")
async def get_study_plans(user_id: str = Depends(get_user_id)):
    plans = await store.list_study_plans(user_id)
    return {"plans": [plan.model_dump() for plan in plans]}

@app.post("/study-plan")
async def create_study_plan(request: StudyPlanRequest, user_id: str = Depends(get_user_id)):
    """Generate and save a day-by-day plan for an exam."""
    try:
        plan = await assistant.generate_study_plan(user_id, request, local_today())
    except PersistenceError as e:
        logger.error(f"Study plan create error: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    if isinstance(plan, ClarificationNeeded):
        raise HTTPException(status_code=400, detail=plan.message)
    return plan

@app.post("/study-plan/tasks/{task_id}/toggle")
async def toggle_study_task(task_id: str, user_id: str = Depends(get_user_id)):
    task = await store.toggle_study_task(user_id, task_id)
    if task is None:
        raise HTTPException(status_code=404, detail="Study task not found")
    return task

@app.get("/notes")
async def get_notes(user_id: str = Depends(get_user_id)):
    notes = await store.list_notes(user_id)
    return {"notes": [note.model_dump() for note in notes]}

@app.post("/notes")
async def add_note(request: NoteRequest, user_id: str = Depends(get_user_id)):
    """Summarize pasted text and save it as a note."""
    if not request.text.strip():
        raise HTTPException(status_code=422, detail="Note text is empty")
    try:
        return await assistant.summarize_note(user_id, request.title, request.text)
    except PersistenceError as e:
        logger.error(f"Note create error: {e}")
        raise HTTPException(status_code=500, detail=str(e))

@app.post("/upload")
async def upload_files(
    files: List[UploadFile] = File(...),
    title: Optional[str] = Form(None),
    user_id: str = Depends(get_user_id)
):
    """Extract text from uploaded files and save each one as a summarized note."""
    processed_files = []

    for file in files:
        content = await file.read()
        entry = {"filename": file.filename, "size": len(content)}

        try:
            result = file_processor.process_file(content, file.filename, file.content_type or "", user_id)
            if not result["content"]:
                raise UnsupportedFileError(f"No text found in {file.filename}")

            note = await assistant.summarize_note(
                user_id,
                title or file.filename,
                result["content"],
                file_name=file.filename,
                file_size=len(content),
                upload_type="file"
            )
            entry.update({"status": "success", "type": result["type"], "page_count": result["page_count"],
                          "note_id": note.id})
        except (UnsupportedFileError, PersistenceError) as e:
            logger.error(f"File upload error: {e}")
            entry.update({"status": "error", "error": str(e)})

        processed_files.append(entry)

    uploaded = sum(1 for entry in processed_files if entry["status"] == "success")
    return {
        "files": processed_files,
        "message": f"{uploaded} file(s) uploaded successfully"
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=config.log_level.lower()
    )
