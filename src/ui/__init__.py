"""NiceGUI interface - thin visualization layer for the chat.

Responsibilities:
    - Message bubbles that re-render on every conversation update
    - Typing indicator and disabled input while a reply is in flight
    - Clear-chat and dark mode controls

Contains no conversation logic. Delegates all operations to ChatController.
"""
