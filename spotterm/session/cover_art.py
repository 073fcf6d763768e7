"""
Cover art derived from the current track

The cache is keyed on the album art URL. A track change with the same
cover (next song on the same album) or a repeated poll of the same track
does not download anything again.
"""

from io import BytesIO
from typing import List, Optional, TYPE_CHECKING

from PIL import Image, UnidentifiedImageError

from ..exceptions import RemoteApiError, TransportError
from ..spotify.models import Track
from ..utils.logger import get_logger

if TYPE_CHECKING:
    from ..spotify.client import SpotifyClient


ASCII_PALETTE = " .:-=+*#%@"

logger = get_logger(__name__)


def render_ascii_art(image_bytes: bytes, width: int = 24) -> List[str]:
    """
    Turn image bytes into lines of ASCII shading

    Args:
        image_bytes: Encoded image (JPEG/PNG)
        width: Number of characters per line

    Returns:
        Lines of equal length; terminal cells are about twice as tall as
        wide, so the height is halved to keep the cover roughly square
    """
    with Image.open(BytesIO(image_bytes)) as img:
        grayscale = img.convert("L")
        height = max(1, int(grayscale.height / max(1, grayscale.width) * width * 0.5))
        resized = grayscale.resize((width, height))
        pixels = list(resized.tobytes())

    palette_size = len(ASCII_PALETTE) - 1
    return [
        "".join(ASCII_PALETTE[(pixel * palette_size) // 255] for pixel in pixels[row * width:(row + 1) * width])
        for row in range(height)
    ]


class CoverArtCache:
    """
    Holds the rendered cover for the current track

    Attributes:
        width: Characters per rendered line
        enabled: When False nothing is ever downloaded
        lines: Rendered cover for the last requested URL
    """

    def __init__(self, client: "SpotifyClient", width: int = 24, enabled: bool = True):
        self._client = client
        self.width = width
        self.enabled = enabled
        self.lines: List[str] = []
        self._url: Optional[str] = None

    def update(self, track: Optional[Track]) -> List[str]:
        """
        Make the cache match the given track

        Args:
            track: Newly playing track, None when nothing plays

        Returns:
            Rendered lines for the track's cover (empty if unavailable)
        """
        url = track.album_art_url if track else None
        if url == self._url:
            return self.lines

        self._url = url
        self.lines = []
        if not url or not self.enabled:
            return self.lines

        try:
            image_bytes = self._client.fetch_image(url)
        except (TransportError, RemoteApiError) as e:
            logger.warning(f"Cover art unavailable: {e}")
            return self.lines

        try:
            self.lines = render_ascii_art(image_bytes, self.width)
        except (UnidentifiedImageError, OSError, ValueError) as e:
            logger.warning(f"Could not decode cover art from {url}: {e}")
        return self.lines
