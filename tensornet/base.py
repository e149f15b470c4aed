# pylint: disable=missing-docstring
from typing import Any, Dict

TRAINABLE_PARAMS = ("weights", "biases")


class BaseEstimator:
    def get_params(self, mode: str = "all") -> Dict[str, Any]:
        """
        Get parameters for this object.

        :param mode: Specifies which parameters to return. Options are:
            - "all": Return all public attributes and trainable parameters.
            - "trainable": Return only trainable parameters (weights and biases).
            - "non_trainable": Return only configuration attributes.
        :return: Dictionary of parameter names mapped to their values.
        """
        trainable = {name: getattr(self, name, None) for name in TRAINABLE_PARAMS}
        trainable = {k: v for k, v in trainable.items() if v is not None}
        non_trainable = {
            k: v for k, v in self.__dict__.items()
            if not k.startswith("_") and k not in TRAINABLE_PARAMS
        }
        if mode == "all":
            return {**non_trainable, **trainable}
        if mode == "trainable":
            return trainable
        if mode == "non_trainable":
            return non_trainable

        raise ValueError(
            f"Invalid mode '{mode}'. Choose from 'all', 'trainable', or 'non_trainable'."
        )
