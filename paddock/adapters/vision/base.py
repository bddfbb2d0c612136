HAVE_CURRENT_DATA = 2   # same meaning as HTMLMediaElement.readyState


class VideoSource:
    """A live preview the detection loop samples from.

    open() and read_frame() may block; the loop calls them from a worker thread.
    """

    ready_state: int = 0

    def open(self):
        pass

    def read_frame(self):
        """Return the current frame as an HxWx3 uint8 array, or None."""
        raise NotImplementedError

    def release(self):
        pass


class Classifier:
    async def detect(self, image) -> list:
        """Return a list of Prediction for one frame."""
        raise NotImplementedError

    def release(self):
        pass
