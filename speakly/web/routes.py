import logging
from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse

from ..constants import PRACTICE_SOURCE_DAILY, PRACTICE_TITLES
from ..exceptions import (
    AuthenticationError,
    InvalidSettingsError,
    ProfileUpdateError,
    QuizError,
)
from ..models.quiz_session import QuizMode, QuizSession
from ..models.user_profile import UserProfile
from ..practice_settings import (
    LANGUAGE_OPTIONS,
    LEVEL_OPTIONS,
    NUM_QUESTIONS_OPTIONS,
    QUESTION_TYPE_OPTIONS,
    TOPIC_OPTIONS,
)
from .state import ClientContext

logger = logging.getLogger(__name__)

router = APIRouter()

QUIZ_ACTIONS = ("start", "select", "submit", "next", "restart")


class LoginRequired(Exception):
    """Raised by protected routes when nobody is signed in."""


# --- Dependencies ---
async def client_context(request: Request):
    """The caller's context, held under its lock for the whole request."""
    context = request.app.state.registry.get(request.state.client_id)
    async with context.lock:
        yield context


def current_user(context: ClientContext = Depends(client_context)) -> UserProfile:
    user = context.orchestrator.auth.current_user()
    if user is None:
        raise LoginRequired()
    return user


def render(
    request: Request,
    context: ClientContext,
    template: str,
    status_code: int = 200,
    **values,
) -> HTMLResponse:
    orchestrator = context.orchestrator
    values.setdefault("user", orchestrator.auth.current_user())
    values["theme"] = orchestrator.theme.current_theme()
    values["available_themes"] = orchestrator.theme.available_themes
    values["current_path"] = request.url.path
    return request.app.state.templates.TemplateResponse(
        request, template, values, status_code=status_code
    )


def redirect(url: str, **params) -> RedirectResponse:
    query = {k: v for k, v in params.items() if v is not None}
    if query:
        url = f"{url}?{urlencode(query)}"
    return RedirectResponse(url=url, status_code=302)


# --- Auth pages ---
@router.get("/")
def index(context: ClientContext = Depends(client_context)):
    if context.orchestrator.auth.is_signed_in:
        return redirect("/home")
    return redirect("/login")


@router.get("/login", response_class=HTMLResponse)
def login_page(request: Request, context: ClientContext = Depends(client_context)):
    if context.orchestrator.auth.is_signed_in:
        return redirect("/home")
    return render(request, context, "login.html", error=None, email="")


@router.post("/login")
def login(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    context: ClientContext = Depends(client_context),
):
    try:
        context.orchestrator.auth.sign_in(email, password)
    except AuthenticationError as e:
        return render(request, context, "login.html", status_code=401, error=str(e), email=email)
    return redirect("/home")


@router.get("/signup", response_class=HTMLResponse)
def signup_page(request: Request, context: ClientContext = Depends(client_context)):
    if context.orchestrator.auth.is_signed_in:
        return redirect("/home")
    return render(request, context, "signup.html", error=None)


@router.post("/signup")
def signup(
    name: str = Form(""),
    context: ClientContext = Depends(client_context),
):
    auth = context.orchestrator.auth
    auth.sign_up()
    if name.strip():
        auth.update_profile(name=name)
    return redirect("/home")


@router.post("/logout")
def logout(context: ClientContext = Depends(client_context)):
    context.orchestrator.dispose()
    context.orchestrator.auth.sign_out()
    return redirect("/login")


@router.post("/theme")
def set_theme(
    theme: str = Form(...),
    next_url: str = Form("/home", alias="next"),
    context: ClientContext = Depends(client_context),
):
    context.orchestrator.theme.set_theme(theme)
    # Only same-site relative targets
    if not next_url.startswith("/") or next_url.startswith("//"):
        next_url = "/home"
    return redirect(next_url)


# --- Home ---
@router.get("/home", response_class=HTMLResponse)
def home(
    request: Request,
    user: UserProfile = Depends(current_user),
    context: ClientContext = Depends(client_context),
):
    dashboard = context.orchestrator.home_dashboard(user)
    return render(request, context, "home.html", user=user, dashboard=dashboard)


# --- Quizzes ---
def _apply_action(quiz: QuizSession, action: str, option_id: Optional[str]):
    if action == "select":
        if option_id is None:
            raise QuizError("Falta la opción seleccionada.")
        quiz.select_option(option_id)
    elif action == "submit":
        if option_id is not None:
            quiz.choose_option(option_id)
        quiz.submit()
    elif action == "next":
        quiz.next_question()
    elif action == "restart":
        quiz.restart()


@router.get("/practice", response_class=HTMLResponse)
def practice_page(
    request: Request,
    source: Optional[str] = None,
    notice: Optional[str] = None,
    user: UserProfile = Depends(current_user),
    context: ClientContext = Depends(client_context),
):
    orchestrator = context.orchestrator
    source = source if source in PRACTICE_TITLES else PRACTICE_SOURCE_DAILY
    quiz = orchestrator.get_quiz(QuizMode.PRACTICE)
    if quiz is None or orchestrator.practice_source != source:
        quiz = orchestrator.start_practice(source)

    return render(
        request,
        context,
        "practice.html",
        user=orchestrator.auth.current_user() or user,
        quiz=quiz.to_dict(),
        source=source,
        notice=notice,
        practice_notice=orchestrator.practice_notice,
        result=orchestrator.last_practice_result,
    )


@router.post("/practice/{action}")
def practice_action(
    action: str,
    option_id: Optional[str] = Form(None),
    source: Optional[str] = Form(None),
    user: UserProfile = Depends(current_user),
    context: ClientContext = Depends(client_context),
):
    orchestrator = context.orchestrator
    if action not in QUIZ_ACTIONS:
        return JSONResponse({"error": f"Unknown action '{action}'"}, status_code=404)

    if action == "start":
        orchestrator.start_practice(source)
        return redirect("/practice", source=orchestrator.practice_source)

    quiz = orchestrator.get_quiz(QuizMode.PRACTICE)
    if quiz is None:
        return redirect("/practice", source=source)

    try:
        _apply_action(quiz, action, option_id)
    except QuizError as e:
        return redirect("/practice", source=orchestrator.practice_source, notice=str(e))
    return redirect("/practice", source=orchestrator.practice_source)


@router.get("/level-test", response_class=HTMLResponse)
def level_test_page(
    request: Request,
    notice: Optional[str] = None,
    user: UserProfile = Depends(current_user),
    context: ClientContext = Depends(client_context),
):
    orchestrator = context.orchestrator
    quiz = orchestrator.get_quiz(QuizMode.LEVEL_TEST)
    return render(
        request,
        context,
        "level_test.html",
        user=orchestrator.auth.current_user() or user,
        quiz=quiz.to_dict() if quiz else None,
        notice=notice,
        outcome=orchestrator.level_test_outcome,
    )


@router.post("/level-test/{action}")
def level_test_action(
    action: str,
    option_id: Optional[str] = Form(None),
    user: UserProfile = Depends(current_user),
    context: ClientContext = Depends(client_context),
):
    orchestrator = context.orchestrator
    if action not in QUIZ_ACTIONS or action == "restart":
        return JSONResponse({"error": f"Unknown action '{action}'"}, status_code=404)

    if action == "start":
        orchestrator.start_level_test()
        return redirect("/level-test")

    quiz = orchestrator.get_quiz(QuizMode.LEVEL_TEST)
    if quiz is None:
        return redirect("/level-test")

    try:
        _apply_action(quiz, action, option_id)
    except QuizError as e:
        return redirect("/level-test", notice=str(e))
    return redirect("/level-test")


@router.get("/api/quiz/{mode}")
def quiz_state(
    mode: str,
    user: UserProfile = Depends(current_user),
    context: ClientContext = Depends(client_context),
):
    if mode not in QuizMode.ALL:
        return JSONResponse({"error": f"Unknown quiz '{mode}'"}, status_code=404)
    quiz = context.orchestrator.get_quiz(mode)
    if quiz is None:
        return JSONResponse({"error": "No active quiz"}, status_code=404)
    return quiz.to_dict()


# --- Settings, profile, progress ---
def _settings_options() -> dict:
    return {
        "language_options": LANGUAGE_OPTIONS,
        "level_options": LEVEL_OPTIONS,
        "topic_options": TOPIC_OPTIONS,
        "num_questions_options": NUM_QUESTIONS_OPTIONS,
        "question_type_options": QUESTION_TYPE_OPTIONS,
    }


@router.get("/practice-settings", response_class=HTMLResponse)
def practice_settings_page(
    request: Request,
    user: UserProfile = Depends(current_user),
    context: ClientContext = Depends(client_context),
):
    settings = context.orchestrator.practice_settings.load()
    return render(
        request,
        context,
        "practice_settings.html",
        user=user,
        settings=settings,
        saved=False,
        error=None,
        **_settings_options(),
    )


@router.post("/practice-settings", response_class=HTMLResponse)
def save_practice_settings(
    request: Request,
    language: str = Form("en"),
    level: str = Form("beginner"),
    topic: str = Form("general"),
    num_questions: str = Form("10", alias="numQuestions"),
    question_type: str = Form("mix", alias="questionType"),
    user: UserProfile = Depends(current_user),
    context: ClientContext = Depends(client_context),
):
    store = context.orchestrator.practice_settings
    form = {
        "language": language,
        "level": level,
        "topic": topic,
        "numQuestions": num_questions,
        "questionType": question_type,
    }
    try:
        settings = store.save_form(form)
    except InvalidSettingsError as e:
        logger.info(f"Rejected practice settings: {e}")
        return render(
            request,
            context,
            "practice_settings.html",
            status_code=400,
            user=user,
            settings=store.load(),
            saved=False,
            error="Revisá los valores seleccionados.",
            **_settings_options(),
        )
    return render(
        request,
        context,
        "practice_settings.html",
        user=user,
        settings=settings,
        saved=True,
        error=None,
        **_settings_options(),
    )


@router.get("/profile", response_class=HTMLResponse)
def profile_page(
    request: Request,
    user: UserProfile = Depends(current_user),
    context: ClientContext = Depends(client_context),
):
    return render(request, context, "profile.html", user=user, saved=False, error=None)


@router.post("/profile", response_class=HTMLResponse)
def update_profile(
    request: Request,
    name: str = Form(""),
    email: str = Form(""),
    user: UserProfile = Depends(current_user),
    context: ClientContext = Depends(client_context),
):
    try:
        user = context.orchestrator.auth.update_profile(name=name, email=email)
    except ProfileUpdateError as e:
        return render(
            request, context, "profile.html", status_code=400, user=user, saved=False, error=str(e)
        )
    return render(request, context, "profile.html", user=user, saved=True, error=None)


@router.get("/progress", response_class=HTMLResponse)
def progress_page(
    request: Request,
    user: UserProfile = Depends(current_user),
    context: ClientContext = Depends(client_context),
):
    overview = context.orchestrator.progress_overview(user)
    return render(request, context, "progress.html", user=user, overview=overview)


@router.get("/healthz")
def healthz():
    return {"status": "ok"}
