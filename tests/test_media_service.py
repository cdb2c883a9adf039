import pytest

from rehab_server.exception import NotFoundError, UnauthorizedError
from rehab_server.repository.media_repository import MediaRepository
from rehab_server.services.media_service import MediaService
from tests.conftest import FakeFS


@pytest.fixture
def media(clock):
    return MediaService(MediaRepository(fs=FakeFS()), clock=clock, max_bytes=1024)


@pytest.mark.parametrize('content_type,expected', [
    ('image/png', 'image'),
    ('video/mp4', 'video'),
    ('audio/mpeg', 'audio'),
    ('application/pdf', ''),
])
def test_upload_classifies_media(media, alice, clock, content_type, expected):
    result = media.upload_media(alice, 'my photo.png', content_type, b'data')
    assert result['path'] == f'chat_media/{clock.now_ms}_my_photo.png'
    assert result['url'] == f'/api/media/{result["path"]}'
    assert result['media_type'] == expected


def test_upload_sanitizes_filename(media, alice, clock):
    result = media.upload_media(alice, '../../etc/passwd', 'text/plain', b'x')
    assert result['path'] == f'chat_media/{clock.now_ms}_etc_passwd'


def test_upload_limits(media, alice):
    with pytest.raises(ValueError):
        media.upload_media(alice, 'empty.png', 'image/png', b'')
    with pytest.raises(ValueError):
        media.upload_media(alice, 'big.png', 'image/png', b'x' * 1025)


def test_upload_requires_session(media):
    with pytest.raises(UnauthorizedError):
        media.upload_media(None, 'a.png', 'image/png', b'x')


def test_open_media(media, alice):
    path = media.upload_media(alice, 'a.png', 'image/png', b'pixels')['path']
    stored = media.open_media(path)
    assert stored.read() == b'pixels'
    assert stored.content_type == 'image/png'
    with pytest.raises(NotFoundError):
        media.open_media('chat_media/missing.png')
