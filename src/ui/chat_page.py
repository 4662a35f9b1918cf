"""NiceGUI chat interface bound to the chat controller's observables."""

from nicegui import ui

from src.agent.chat_controller import ChatController
from src.agent.config import get_chat_config
from src.agent.model_client import get_model_client
from src.models.schemas import ChatMessage
from src.ui.formatting import (
    escape_html,
    format_timestamp,
    markdown_to_html,
    visible_messages,
)

CUSTOM_CSS = """
<link href="https://fonts.googleapis.com/css2?family=Inter:wght@400;500;600&display=swap"
      rel="stylesheet">
<style>
    * { font-family: 'Inter', sans-serif; }

    .app-container {
        border-radius: 12px;
        box-shadow: 0 2px 8px rgba(0, 0, 0, 0.1);
        overflow: hidden;
    }

    .header { background: linear-gradient(135deg, #4285f4 0%, #9b72cb 100%); }

    .message-user {
        background: linear-gradient(135deg, #4285f4 0%, #9b72cb 100%);
        color: white;
        border-radius: 18px 18px 4px 18px;
    }

    .message-assistant {
        background: #f3f4f6;
        color: #1f2937;
        border-radius: 18px 18px 18px 4px;
    }
    .body--dark .message-assistant { background: #374151; color: #f9fafb; }

    .typing-dot {
        width: 8px; height: 8px;
        background: #4285f4;
        border-radius: 50%;
        animation: bounce 1.4s infinite ease-in-out;
    }
    .typing-dot:nth-child(2) { animation-delay: 0.2s; }
    .typing-dot:nth-child(3) { animation-delay: 0.4s; }

    @keyframes bounce {
        0%, 60%, 100% { transform: translateY(0); }
        30% { transform: translateY(-6px); }
    }

    .message-assistant code { font-family: 'Menlo', 'Monaco', monospace; }
</style>
"""


def create_controller() -> ChatController:
    """Build a controller for one browser client from the environment config."""
    config = get_chat_config()
    return ChatController(
        get_model_client(),
        config.throttle,
        streaming=config.streaming,
    )


@ui.page("/")
def chat_page() -> None:
    """Main chat page."""
    ui.add_head_html(CUSTOM_CSS)
    dark = ui.dark_mode()
    controller = create_controller()

    messages_container: ui.column
    scroll_area: ui.scroll_area
    input_field: ui.textarea
    send_btn: ui.button
    clear_btn: ui.button

    def render_message(message: ChatMessage) -> None:
        align = "justify-end" if message.from_user else "justify-start"
        bubble = "message-user" if message.from_user else "message-assistant"

        with ui.row().classes(f"w-full {align}"):
            with ui.column().classes("max-w-[75%] gap-1"):
                with ui.element("div").classes(f"px-4 py-3 {bubble}"):
                    if message.from_user:
                        content = escape_html(message.text).replace("\n", "<br>")
                    else:
                        content = markdown_to_html(message.text)
                    ui.html(content, sanitize=False).classes("text-sm leading-relaxed")
                ui.label(format_timestamp(message.timestamp)).classes(
                    f"text-[10px] text-gray-400 {'self-end' if message.from_user else 'self-start'}"
                )

    def render_typing_indicator() -> None:
        with ui.row().classes("w-full justify-start"):
            with ui.element("div").classes("message-assistant px-4 py-3"):
                with ui.row().classes("gap-1"):
                    for _ in range(3):
                        ui.element("div").classes("typing-dot")

    def refresh_messages(*_: object) -> None:
        messages_container.clear()
        with messages_container:
            if not controller.messages.value:
                with ui.column().classes("w-full h-64 items-center justify-center gap-3"):
                    ui.icon("forum").classes("text-5xl text-gray-300")
                    ui.label("Start a conversation").classes("text-lg text-gray-400")
            for message in visible_messages(
                controller.messages.value, controller.is_loading.value
            ):
                render_message(message)
            if controller.is_loading.value:
                render_typing_indicator()
        scroll_area.scroll_to(percent=1.0)

    def on_loading_changed(loading: bool) -> None:
        send_btn.set_enabled(not loading)
        clear_btn.set_enabled(not loading)
        refresh_messages()

    def send_message() -> None:
        text = input_field.value or ""
        if controller.send_message(text) is not None:
            input_field.value = ""

    # === UI Layout ===
    with (
        ui.element("div").classes("w-full min-h-screen p-4 md:p-8"),
        ui.column().classes("w-full max-w-3xl mx-auto app-container").style(
            "height: calc(100vh - 4rem)"
        ),
    ):
        # Header
        with ui.row().classes("w-full header px-5 py-4 items-center justify-between"):
            with ui.row().classes("items-center gap-3"):
                ui.icon("auto_awesome").classes("text-white text-3xl")
                ui.label("Gemini Chat").classes("text-lg font-semibold text-white")
            with ui.row().classes("items-center gap-1"):
                ui.button(icon="dark_mode", on_click=dark.toggle).props("flat round color=white")
                clear_btn = ui.button(icon="delete_sweep", on_click=controller.clear_chat).props(
                    "flat round color=white"
                )

        # Messages
        with ui.scroll_area().classes("flex-grow w-full") as scroll_area:
            messages_container = ui.column().classes("w-full p-5 gap-4")

        # Input
        with ui.row().classes("w-full p-4 gap-3 items-end border-t"):
            input_field = (
                ui.textarea(placeholder="Type a message...")
                .props("autogrow outlined dense rows=1")
                .classes("flex-grow")
                .on("keydown.enter.prevent", send_message)
            )
            send_btn = ui.button(icon="send", on_click=send_message).props("round unelevated")

    refresh_messages()
    unsubscribe_messages = controller.messages.subscribe(refresh_messages)
    unsubscribe_loading = controller.is_loading.subscribe(on_loading_changed)

    async def on_disconnect() -> None:
        unsubscribe_messages()
        unsubscribe_loading()
        await controller.close()

    ui.context.client.on_disconnect(on_disconnect)


def main() -> None:
    ui.run(title="Gemini Chat", port=8080, reload=False)


if __name__ in {"__main__", "__mp_main__"}:
    main()
