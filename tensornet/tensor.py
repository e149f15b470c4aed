"""
Dense three-axis tensor with value semantics.
"""
import numpy as np

from .exceptions import InvalidArgumentError, ShapeMismatchError


class Tensor:
    """
    Fixed-shape 3-axis float64 buffer.

    The shape never changes after construction. Every operation returning a
    tensor allocates a fresh buffer, so two Tensor instances never share
    storage.
    """

    __slots__ = ('_data',)

    def __init__(self, d0, d1, d2):
        """
        Create a zero-filled tensor.

        Args:
            d0 (int): Size of axis 0
            d1 (int): Size of axis 1
            d2 (int): Size of axis 2
        """
        shape = (d0, d1, d2)
        for dim in shape:
            if isinstance(dim, bool) or not isinstance(dim, (int, np.integer)) or dim <= 0:
                raise InvalidArgumentError(
                    f"Tensor dimensions must be positive integers, got {shape}")
        self._data = np.zeros(tuple(int(d) for d in shape), dtype=np.float64)

    @classmethod
    def from_array(cls, array):
        """
        Build a tensor from a 3-D array-like, copying its contents.

        Args:
            array (array_like): Nested sequence or ndarray with exactly 3 axes

        Returns:
            Tensor: New tensor holding a copy of the values
        """
        data = np.array(array, dtype=np.float64)
        if data.ndim != 3:
            raise ShapeMismatchError(
                f"Tensor must be 3-dimensional, got array with shape {data.shape}")
        tensor = cls(*data.shape)
        tensor._data[...] = data
        return tensor

    @classmethod
    def from_vector(cls, values):
        """Build a (1, n, 1) tensor, the layout dense layers read and write."""
        data = np.asarray(values, dtype=np.float64).ravel()
        return cls.from_array(data.reshape(1, -1, 1))

    @property
    def shape(self):
        """tuple: The (d0, d1, d2) shape."""
        return self._data.shape

    @property
    def size(self):
        """int: Total number of elements."""
        return int(self._data.size)

    @property
    def rank(self):
        return 3

    @property
    def values(self):
        """
        Live storage of this tensor.

        Layers and optimizers update parameters through it in place; the array
        belongs to this tensor only.
        """
        return self._data

    def _check_index(self, i, j, k):
        for axis, (idx, dim) in enumerate(zip((i, j, k), self._data.shape)):
            if not 0 <= idx < dim:
                raise IndexError(
                    f"Index {idx} out of bounds for axis {axis} with size {dim}")

    def get(self, i, j, k):
        """Return the element at (i, j, k)."""
        self._check_index(i, j, k)
        return float(self._data[i, j, k])

    def set(self, i, j, k, value):
        """Store value at (i, j, k)."""
        self._check_index(i, j, k)
        self._data[i, j, k] = value

    def _check_same_shape(self, other):
        if self.shape != other.shape:
            raise ShapeMismatchError(
                f"Tensor shapes must match: {self.shape} vs {other.shape}")

    def add(self, other):
        """Elementwise sum with a tensor of the same shape."""
        self._check_same_shape(other)
        return Tensor.from_array(self._data + other._data)

    def multiply(self, other):
        """
        Elementwise product with a tensor, or scaling by a number.

        Args:
            other (Tensor or float): Same-shape tensor or scalar

        Returns:
            Tensor: New tensor with the product
        """
        if isinstance(other, Tensor):
            self._check_same_shape(other)
            return Tensor.from_array(self._data * other._data)
        return Tensor.from_array(self._data * float(other))

    def __add__(self, other):
        if not isinstance(other, Tensor):
            return NotImplemented
        return self.add(other)

    def __mul__(self, other):
        return self.multiply(other)

    __rmul__ = __mul__

    def transpose(self):
        """Swap the first two axes."""
        return Tensor.from_array(self._data.transpose(1, 0, 2))

    def reshape(self, d0, d1, d2):
        """
        Reinterpret the elements under a new shape in row-major order.

        Args:
            d0, d1, d2 (int): New shape

        Returns:
            Tensor: New tensor with the same elements
        """
        if min(d0, d1, d2) <= 0:
            raise InvalidArgumentError(
                f"Tensor dimensions must be positive integers, got {(d0, d1, d2)}")
        new_size = d0 * d1 * d2
        if new_size != self.size:
            raise ShapeMismatchError(
                f"Cannot reshape tensor of {self.size} elements to "
                f"{(d0, d1, d2)}")
        return Tensor.from_array(self._data.reshape(d0, d1, d2))

    def sum(self):
        return float(np.sum(self._data))

    def mean(self):
        return float(np.mean(self._data))

    def copy(self):
        """Independent deep copy."""
        return Tensor.from_array(self._data)

    def to_array(self):
        """Copy of the storage as a 3-D ndarray."""
        return self._data.copy()

    def flatten(self):
        """Copy of the elements as a 1-D ndarray in row-major order."""
        return self._data.ravel().copy()

    def fill(self, value):
        """Set every element to value, in place."""
        self._data.fill(value)

    def allclose(self, other, tol=1e-9):
        """Whether other has the same shape and values within tol."""
        if not isinstance(other, Tensor) or self.shape != other.shape:
            return False
        return bool(np.allclose(self._data, other._data, rtol=0.0, atol=tol))

    def __eq__(self, other):
        if not isinstance(other, Tensor):
            return NotImplemented
        return self.shape == other.shape and bool(np.array_equal(self._data, other._data))

    __hash__ = None

    def __repr__(self):
        lines = [f"Tensor(shape={list(self.shape)})"]
        d0, d1, d2 = self.shape
        for i in range(min(d0, 3)):
            lines.append(f"Layer {i}:")
            for j in range(min(d1, 5)):
                lines.append(" ".join(f"{self._data[i, j, k]:8.3f}"
                                      for k in range(min(d2, 5))))
            if d1 > 5:
                lines.append("...")
        if d0 > 3:
            lines.append("...")
        return "\n".join(lines)
