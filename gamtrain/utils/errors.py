# gamtrain/utils/errors.py
class UserInputError(RuntimeError):
    """
    Raised for invalid user-provided input (config files, data paths).
    Should NOT print traceback.
    """


class ConfigError(UserInputError):
    """
    Missing / invalid trainer config keys, unknown loss kind.
    Raised at load time, before any training work starts.
    """


class ModelInitError(RuntimeError):
    """
    Initial model could not be built or loaded (no usable feature
    statistics, unreadable init model). Fatal.
    """


class FunctionShapeMismatch(RuntimeError):
    """
    Bags reported functions of different variants or shapes for the
    same (family, name). Averaging is undefined, so this is fatal.
    """


class BagFailure(RuntimeError):
    """
    A bag worker raised while running SGD over its partition.
    Fails the whole iteration.
    """

    def __init__(self, index: int, reason: str):
        super().__init__(f"bag {index} failed: {reason}")
        self.index = index
        self.reason = reason

    def __reduce__(self):
        return BagFailure, (self.index, self.reason)
