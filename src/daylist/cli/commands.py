# src/daylist/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from datetime import date

from ..core.state import AppState
from ..errors import AuthError
from ..tasks.task_api import format_task, group_tasks, normalize_new_task, normalize_note
from ..tasks.task_models import Task

CommandHandler = Callable[[AppState, list[str]], Awaitable[str]]

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console front end (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    async def handle(self, state: AppState, line: str) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        return await handler(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()

NOT_SIGNED_IN = "You are not signed in. Use /login <email> <password> or /signup <email> <password>."


# ---- helpers ----


def _today(state: AppState) -> date:
    return state.board.sync.today()


def _resolve_task(state: AppState, ref: str) -> Task | None:
    """A 1-based number from the last listing, or an id (prefix)."""
    tasks = state.board.tasks
    if ref.isdigit():
        n = int(ref)
        if 1 <= n <= len(state.last_listing):
            task_id = state.last_listing[n - 1]
            return next((t for t in tasks if t.id == task_id), None)
    matches = [t for t in tasks if t.id == ref or t.id.startswith(ref)]
    return matches[0] if len(matches) == 1 else None


def _child_index(ref: str, size: int) -> int | None:
    if not ref.isdigit():
        return None
    n = int(ref)
    return n - 1 if 1 <= n <= size else None


def _render_listing(state: AppState, tasks: list[Task], title: str) -> list[str]:
    today = _today(state)
    lines = [f"{title}:"]
    if not tasks:
        lines.append("  (none)")
    for task in tasks:
        state.last_listing.append(task.id)
        lines.append(f"  {len(state.last_listing)}. {format_task(task, today)}")
    return lines


def _render_details(task: Task, today: date) -> str:
    lines = [format_task(task, today), f"  id: {task.id}"]
    if task.description:
        lines.append(f"  {task.description}")
    if task.subtasks:
        lines.append("  Subtasks:")
        for i, s in enumerate(task.subtasks, start=1):
            lines.append(f"    {i}. [{'x' if s.completed else ' '}] {s.title}")
    if task.notes:
        lines.append("  Notes:")
        for i, n in enumerate(task.notes, start=1):
            lines.append(f"    {i}. {n.content}")
    return "\n".join(lines)


# ---- session commands ----


async def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


async def _auth(state: AppState, args: list[str], *, sign_up: bool) -> str:
    verb = "signup" if sign_up else "login"
    if len(args) != 2:
        return f"Usage: /{verb} <email> <password>"
    email, password = args
    try:
        if sign_up:
            user = await state.session.sign_up(email, password)
        else:
            user = await state.session.sign_in(email, password)
    except AuthError as e:
        logger.info("%s failed for %s: %s", verb, email, e)
        return f"Error: {e}"

    if state.session.user is None:
        who = user.email if user and user.email else email
        return f"Account created for {who}. Check your email to confirm it, then /login."

    state.board.sync.clear()
    await state.board.fetch_tasks(state.selected_date)
    return f"Signed in as {state.session.user.email or state.session.user.id}. {len(state.board.tasks)} task(s)."


async def cmd_login(state: AppState, args: list[str]) -> str:
    return await _auth(state, args, sign_up=False)


async def cmd_signup(state: AppState, args: list[str]) -> str:
    return await _auth(state, args, sign_up=True)


async def cmd_logout(state: AppState, args: list[str]) -> str:
    if state.session.user is None:
        return "Not signed in."
    await state.session.sign_out()
    state.board.sync.clear()
    state.last_listing.clear()
    return "Signed out."


async def cmd_status(state: AppState, args: list[str]) -> str:
    user = state.session.user
    who = (user.email or user.id) if user else "(not signed in)"
    day = state.selected_date.isoformat() if state.selected_date else "all dates"
    return (
        "Status:\n"
        f"  User: {who}\n"
        f"  Showing: {day}\n"
        f"  Tasks loaded: {len(state.board.tasks)}"
    )


# ---- task commands ----


async def cmd_tasks(state: AppState, args: list[str]) -> str:
    """
    /tasks          -> today + later
    /tasks today    -> today bucket
    /tasks later    -> later bucket
    /tasks done     -> completed history
    /tasks all      -> all three
    """
    if state.session.user is None:
        return NOT_SIGNED_IN
    which = args[0].lower() if args else "open"
    groups = group_tasks(state.board.tasks)
    sections = {
        "today": [("Today", groups.today)],
        "later": [("Later", groups.later)],
        "done": [("Completed", groups.completed)],
        "open": [("Today", groups.today), ("Later", groups.later)],
        "all": [("Today", groups.today), ("Later", groups.later), ("Completed", groups.completed)],
    }.get(which)
    if sections is None:
        return "Usage: /tasks [today|later|done|all]"

    state.last_listing.clear()
    lines: list[str] = []
    for title, tasks in sections:
        lines.extend(_render_listing(state, tasks, title))
    return "\n".join(lines)


async def cmd_refresh(state: AppState, args: list[str]) -> str:
    if state.session.user is None:
        return NOT_SIGNED_IN
    fetched = await state.board.fetch_tasks(state.selected_date)
    if fetched is None:
        return "Could not refresh tasks."
    return f"{len(fetched)} task(s) loaded."


async def cmd_day(state: AppState, args: list[str]) -> str:
    """
    /day             -> show the current filter
    /day 2025-01-31  -> only tasks due that day
    /day today       -> only tasks due today
    /day all         -> every task
    """
    if not args:
        day = state.selected_date.isoformat() if state.selected_date else "all dates"
        return f"Showing {day}. Use /day <YYYY-MM-DD|today|all>."

    arg = args[0].lower()
    if arg == "all":
        state.selected_date = None
    elif arg == "today":
        state.selected_date = _today(state)
    else:
        try:
            state.selected_date = date.fromisoformat(arg)
        except ValueError:
            return "Usage: /day <YYYY-MM-DD|today|all>"

    if state.session.user is None:
        return NOT_SIGNED_IN
    await state.board.fetch_tasks(state.selected_date)
    shown = state.selected_date.isoformat() if state.selected_date else "all dates"
    return f"Showing {shown}: {len(state.board.tasks)} task(s)."


async def cmd_add(state: AppState, args: list[str]) -> str:
    """/add <title> [-- description]"""
    if state.session.user is None:
        return NOT_SIGNED_IN
    text = " ".join(args)
    title, _, description = text.partition(" -- ")
    cleaned = normalize_new_task(title, description)
    if cleaned is None:
        return "Usage: /add <title> [-- description]"

    task = await state.board.create_task(cleaned[0], cleaned[1], state.selected_date)
    if task is None:
        return "Task was not created."
    return f"Added: {format_task(task, _today(state))}"


def _task_command(
    action: Callable[[AppState, Task], Awaitable[Task | bool | None]],
    usage: str,
    done: str,
) -> CommandHandler:
    async def handler(state: AppState, args: list[str]) -> str:
        if state.session.user is None:
            return NOT_SIGNED_IN
        if len(args) != 1:
            return f"Usage: {usage}"
        task = _resolve_task(state, args[0])
        if task is None:
            return f"No task {args[0]!r}. Use /tasks to list them."
        result = await action(state, task)
        if result is None or result is False:
            return "Nothing changed."
        if isinstance(result, Task):
            return f"{done}: {format_task(result, _today(state))}"
        return f"{done}: {task.title}"

    return handler


cmd_done = _task_command(lambda s, t: s.board.toggle_task(t.id, True), "/done <n>", "Completed")
cmd_undo = _task_command(lambda s, t: s.board.toggle_task(t.id, False), "/undo <n>", "Reopened")
cmd_tomorrow = _task_command(lambda s, t: s.board.move_task_to_tomorrow(t.id), "/tomorrow <n>", "Moved")
cmd_later = _task_command(lambda s, t: s.board.move_task_to_later(t.id), "/later <n>", "Moved to later")
cmd_now = _task_command(lambda s, t: s.board.move_task_to_today(t.id), "/today <n>", "Moved to today")
cmd_rm = _task_command(lambda s, t: s.board.delete_task(t.id), "/rm <n>", "Deleted")


async def cmd_show(state: AppState, args: list[str]) -> str:
    if state.session.user is None:
        return NOT_SIGNED_IN
    if len(args) != 1:
        return "Usage: /show <n>"
    task = _resolve_task(state, args[0])
    if task is None:
        return f"No task {args[0]!r}. Use /tasks to list them."
    return _render_details(task, _today(state))


# ---- subtask / note commands ----


async def cmd_sub(state: AppState, args: list[str]) -> str:
    """
    /sub <n> <title>      -> add a subtask
    /sub <n> done <m>     -> complete subtask m
    /sub <n> undo <m>     -> reopen subtask m
    /sub <n> rm <m>       -> delete subtask m
    """
    if state.session.user is None:
        return NOT_SIGNED_IN
    if len(args) < 2:
        return "Usage: /sub <n> <title> | /sub <n> done|undo|rm <m>"
    task = _resolve_task(state, args[0])
    if task is None:
        return f"No task {args[0]!r}. Use /tasks to list them."

    verb = args[1].lower()
    if verb in ("done", "undo", "rm") and len(args) == 3:
        idx = _child_index(args[2], len(task.subtasks))
        if idx is None:
            return f"No subtask {args[2]!r} on {task.title!r}."
        subtask = task.subtasks[idx]
        if verb == "rm":
            ok = await state.board.delete_subtask(subtask.id, task.id)
            return f"Subtask removed: {subtask.title}" if ok else "Nothing changed."
        updated = await state.board.toggle_subtask(subtask.id, verb == "done")
        if updated is None:
            return "Nothing changed."
        return f"Subtask [{'x' if updated.completed else ' '}] {updated.title}"

    title = " ".join(args[1:]).strip()
    if not title:
        return "Usage: /sub <n> <title>"
    created = await state.board.create_subtask(task.id, title)
    return f"Subtask added to {task.title!r}: {created.title}" if created else "Nothing changed."


async def cmd_note(state: AppState, args: list[str]) -> str:
    """
    /note <n> <text>          -> add a note
    /note <n> edit <m> <text> -> replace note m
    /note <n> rm <m>          -> delete note m
    """
    if state.session.user is None:
        return NOT_SIGNED_IN
    if len(args) < 2:
        return "Usage: /note <n> <text> | /note <n> edit <m> <text> | /note <n> rm <m>"
    task = _resolve_task(state, args[0])
    if task is None:
        return f"No task {args[0]!r}. Use /tasks to list them."

    verb = args[1].lower()
    if verb in ("edit", "rm") and len(args) >= 3:
        idx = _child_index(args[2], len(task.notes))
        if idx is None:
            return f"No note {args[2]!r} on {task.title!r}."
        note = task.notes[idx]
        if verb == "rm":
            ok = await state.board.delete_note(note.id, task.id)
            return "Note removed." if ok else "Nothing changed."
        content = normalize_note(" ".join(args[3:]))
        if content is None:
            return "Usage: /note <n> edit <m> <text>"
        updated = await state.board.update_note(note.id, content)
        return "Note updated." if updated else "Nothing changed."

    content = normalize_note(" ".join(args[1:]))
    if content is None:
        return "Usage: /note <n> <text>"
    created = await state.board.create_note(task.id, content)
    return f"Note added to {task.title!r}." if created else "Nothing changed."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("login", cmd_login, help_text="Sign in: /login <email> <password>.")
registry.register("signup", cmd_signup, help_text="Create an account: /signup <email> <password>.")
registry.register("logout", cmd_logout, help_text="Sign out.")
registry.register("status", cmd_status, help_text="Show the signed-in user and date filter.")
registry.register("tasks", cmd_tasks, help_text="List tasks: /tasks [today|later|done|all].", aliases=["ls"])
registry.register("refresh", cmd_refresh, help_text="Reload tasks from the server.")
registry.register("day", cmd_day, help_text="Filter by due date: /day <YYYY-MM-DD|today|all>.")
registry.register("add", cmd_add, help_text="Add a task: /add <title> [-- description].")
registry.register("show", cmd_show, help_text="Show a task with subtasks and notes: /show <n>.")
registry.register("done", cmd_done, help_text="Complete a task: /done <n>.")
registry.register("undo", cmd_undo, help_text="Reopen a completed task: /undo <n>.")
registry.register("tomorrow", cmd_tomorrow, help_text="Push the due date one day: /tomorrow <n>.")
registry.register("later", cmd_later, help_text="Move a task to Later: /later <n>.")
registry.register("today", cmd_now, help_text="Move a task back to Today: /today <n>.")
registry.register("rm", cmd_rm, help_text="Delete a task: /rm <n>.")
registry.register("sub", cmd_sub, help_text="Subtasks: /sub <n> <title> | /sub <n> done|undo|rm <m>.")
registry.register("note", cmd_note, help_text="Notes: /note <n> <text> | /note <n> edit|rm <m> ...")
