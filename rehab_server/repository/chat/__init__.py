from rehab_server.repository.chat.message_repository import MessageRepository
from rehab_server.repository.chat.chat_room_repository import ChatRoomRepository
from rehab_server.repository.chat.user_chat_rooms_repository import UserChatRoomsRepository
from rehab_server.repository.chat.typing_repository import TypingRepository

__all__ = [
    'MessageRepository',
    'ChatRoomRepository',
    'UserChatRoomsRepository',
    'TypingRepository'
]
