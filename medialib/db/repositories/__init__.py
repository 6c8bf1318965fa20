from .folder_repo import FolderRepo
from .media_repo import MediaRepo
from .gallery_repo import GalleryImageRepo
