import copy
import pickle
import struct
import unittest
import warnings
from types import SimpleNamespace
import numpy as np
from threespace import Vec3, to_vector3, vec3
from threespace.errors import InvalidVectorInputError, ZeroLengthWarning


class TestConversion(unittest.TestCase):
    def test_accepted_forms(self):
        expected = [1.0, 2.0, 3.0]
        for value in ([1, 2, 3], (1, 2, 3), np.array([1, 2, 3]), np.array([1.0, 2.0, 3.0]),
                      vec3(1, 2, 3), {"x": 1, "y": 2, "z": 3}, SimpleNamespace(x=1, y=2, z=3),
                      struct.pack("ddd", 1, 2, 3), bytearray(struct.pack("ddd", 1, 2, 3))):
            out = to_vector3(value)
            self.assertIsInstance(out, np.ndarray)
            self.assertEqual(out.dtype, np.float64)
            np.testing.assert_array_equal(out, expected)

    def test_missing_trailing_component(self):
        np.testing.assert_array_equal(to_vector3([1, 2]), [1, 2, 0])
        np.testing.assert_array_equal(to_vector3(np.array([4, 5])), [4, 5, 0])
        np.testing.assert_array_equal(to_vector3({"x": 1}), [1, 0, 0])
        np.testing.assert_array_equal(to_vector3([1, 2], fill=1.0), [1, 2, 1])

    def test_result_is_a_copy(self):
        arr = np.array([1.0, 2.0, 3.0])
        out = to_vector3(arr)
        out[0] = 9
        self.assertEqual(arr[0], 1.0)
        v = vec3(1, 2, 3)
        to_vector3(v)[0] = 9
        self.assertEqual(v.x, 1.0)

    def test_rejected_forms(self):
        for value in ([1], [1, 2, 3, 4], [], ("a", 2, 3), [1, None, 3], "xyz", None, 5,
                      np.zeros((2, 3)), np.array(["a", "b", "c"]), np.zeros(4),
                      {"x": "1"}, {}, {"q": 1}, b"abc", SimpleNamespace(x=1, y="2", z=3)):
            with self.assertRaises(InvalidVectorInputError, msg=repr(value)):
                to_vector3(value)

    def test_error_is_value_error(self):
        with self.assertRaises(ValueError):
            vec3(1, 2, 3, 4)


class TestVec3(unittest.TestCase):
    def test_construct(self):
        self.assertEqual(vec3().xyz, (0.0, 0.0, 0.0))
        self.assertEqual(vec3(1, 2).xyz, (1.0, 2.0, 0.0))
        self.assertEqual(vec3([4, 5, 6]).xyz, (4.0, 5.0, 6.0))
        self.assertEqual(Vec3(1, 2, 3), vec3(1, 2, 3))
        with self.assertRaises(InvalidVectorInputError):
            Vec3("a", 2, 3)

    def test_attributes(self):
        v = vec3(1, 2, 3)
        v.x = 4
        v.y += 1
        v.z = -1
        self.assertEqual(list(v), [4.0, 3.0, -1.0])
        self.assertEqual(v[1], 3.0)
        self.assertEqual(len(v), 3)
        v.xyz = (7, 8, 9)
        self.assertEqual(v.to_list(), [7.0, 8.0, 9.0])
        np.testing.assert_array_equal(np.asarray(v), [7, 8, 9])

    def test_magnitude(self):
        v = vec3(3, 4, 0)
        self.assertEqual(v.magnitude, 5.0)
        v.magnitude = 10
        np.testing.assert_allclose(v.xyz, (6, 8, 0))

    def test_zero_magnitude_warns(self):
        v = vec3(0, 0, 0)
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            with self.assertLogs("threespace.vector", level="WARNING"):
                v.magnitude = 2
        self.assertTrue(any(issubclass(w.category, ZeroLengthWarning) for w in caught))
        self.assertEqual(v.xyz, (0.0, 0.0, 0.0))

    def test_arithmetic_in_place(self):
        v = vec3(1, 2, 3)
        self.assertIs(v.add(1, 1, 1), v)
        self.assertEqual(v.xyz, (2.0, 3.0, 4.0))
        v.sub([1, 1])
        self.assertEqual(v.xyz, (1.0, 2.0, 4.0))
        v.scale(2)
        self.assertEqual(v.xyz, (2.0, 4.0, 8.0))
        v.scale(1, .5)
        self.assertEqual(v.xyz, (2.0, 2.0, 8.0))
        v.set(0, 1)
        self.assertEqual(v.xyz, (0.0, 1.0, 0.0))

    def test_operators(self):
        a = vec3(1, 2, 3)
        b = vec3(1, 1, 1)
        self.assertEqual(a + b, vec3(2, 3, 4))
        self.assertEqual(a - [1, 1, 1], vec3(0, 1, 2))
        self.assertEqual(-a, vec3(-1, -2, -3))
        self.assertEqual(a * 2, vec3(2, 4, 6))
        self.assertEqual(2 * a, vec3(2, 4, 6))
        self.assertEqual(a.xyz, (1.0, 2.0, 3.0))
        self.assertNotEqual(a, b)
        self.assertNotEqual(a, (1, 2, 3))
        with self.assertRaises(TypeError):
            hash(a)

    def test_dot_and_cos(self):
        a = vec3(1, 0, 0)
        self.assertEqual(a.dot(0, 1, 0), 0.0)
        self.assertEqual(a.dot([2, 3, 4]), 2.0)
        self.assertAlmostEqual(a.cos(1, 1, 0), 1 / np.sqrt(2))
        self.assertAlmostEqual(a.cos(-5, 0, 0), -1.0)
        with self.assertRaises(ZeroDivisionError):
            a.cos(0, 0, 0)

    def test_cross(self):
        x = vec3(1, 0, 0)
        z = x.cross(0, 1, 0)
        self.assertEqual(z, vec3(0, 0, 1))
        self.assertEqual(x.xyz, (1.0, 0.0, 0.0))
        out = vec3()
        ret = out.cross([0, 1, 0], (0, 0, 1))
        self.assertIs(ret, out)
        self.assertEqual(out, vec3(1, 0, 0))

    def test_repr_and_str(self):
        v = vec3(1, 2.5, -3)
        self.assertEqual(repr(v), "Vec3(1.0, 2.5, -3.0)")
        self.assertEqual(str(v), "[1.0 2.5 -3.0]")

    def test_copies(self):
        v = vec3(1, 2, 3)
        for other in (copy.copy(v), copy.deepcopy(v), pickle.loads(pickle.dumps(v))):
            self.assertEqual(other, v)
            other.x = 9
            self.assertEqual(v.x, 1.0)


if __name__ == "__main__":
    unittest.main()
