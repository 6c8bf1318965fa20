from .validator import ReferentialValidator
from .folder_service import FolderService, UNSET
from .gallery_service import GalleryService, OrderEntry
