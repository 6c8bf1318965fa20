from .mixins import Base
from .folder import MediaFolder
from .media import Media
from .gallery import ImageGallery, GalleryImage
