"""Terminal front end: ``python -m protools_chat``."""

import asyncio

from .config import BOT_NAME, COURSE_NAME, build_context
from .logging import configure_logging
from .widget import REQUIRED_ELEMENTS, ChatView, ChatWidget


class ConsoleView(ChatView):
    def __init__(self):
        self.pending = ""

    def has_element(self, element_id: str) -> bool:
        return element_id in REQUIRED_ELEMENTS

    def read_input(self) -> str:
        return self.pending

    def clear_input(self) -> None:
        self.pending = ""

    def add_message(self, text: str, role: str) -> None:
        if role == "assistant":
            print(f"\n{BOT_NAME}: {text}\n")

    def show_status(self, text: str) -> None:
        print(text)

    def set_panel_open(self, is_open: bool) -> None:
        pass

    def confirm(self, prompt: str) -> bool:
        return input(f"{prompt} [y/N] ").strip().lower() in {"y", "yes"}


async def main() -> None:
    context = build_context()
    configure_logging(context.settings.log_level)

    view = ConsoleView()
    widget = ChatWidget(context, view)
    if not widget.mount():
        return
    widget.open()

    print(f"{COURSE_NAME} {BOT_NAME}. Commands: /export, /count, /clear, /quit")
    loop = asyncio.get_running_loop()
    try:
        while True:
            line = (await loop.run_in_executor(None, input, "> ")).strip()
            if line in {"/quit", "/exit"}:
                break
            if line == "/export":
                print(f"Saved {context.chat_log.export_to('.')}")
                continue
            if line == "/count":
                print(f"Total chat log entries: {context.chat_log.count()}")
                continue
            if line == "/clear":
                if widget.clear_logs():
                    print("Chat logs cleared.")
                continue
            view.pending = line
            await widget.send()
    except (EOFError, KeyboardInterrupt):
        pass
    finally:
        widget.unmount()


if __name__ == "__main__":
    asyncio.run(main())
