from abc import ABC, abstractmethod
from .utils import camel_to_snake

class Publisher(ABC):

    @abstractmethod
    async def publish(self, data, timestamp):
        pass

    @property
    def name(self):
        return camel_to_snake(self.__class__.__name__)
