import unittest
import numpy as np
from threespace import Projection, frustum, perspective, space
from threespace.errors import InvalidProjectionError


def to_ndc(matrix, p):
    clip = matrix @ np.append(np.asarray(p, dtype=float), 1.0)
    return clip[:3] / clip[3]


class TestFrustum(unittest.TestCase):
    def test_matrix_values(self):
        p = frustum(-1, 1, -1, 1, 1, 100)
        expected = np.array([
            [1, 0, 0, 0],
            [0, 1, 0, 0],
            [0, 0, -101 / 99, -200 / 99],
            [0, 0, -1, 0],
        ])
        np.testing.assert_allclose(p.matrix, expected)
        self.assertTrue(p.is_centered)

    def test_off_center(self):
        p = frustum(0, 2, -1, 3, 2, 20)
        self.assertFalse(p.is_centered)
        np.testing.assert_allclose(p.matrix[0, :3], [2, 0, 1])
        np.testing.assert_allclose(p.matrix[1, :3], [0, 1, .5])

    def test_defaults(self):
        p = Projection()
        self.assertEqual((p.left, p.right, p.bottom, p.top, p.near, p.far),
                         (-1.0, 1.0, -1.0, 1.0, 1.0, 10000.0))

    def test_near_and_far_planes(self):
        p = frustum(-2, 2, -1, 1, 3, 50)
        np.testing.assert_allclose(to_ndc(p.matrix, [2, 1, -3]), [1, 1, -1])
        np.testing.assert_allclose(to_ndc(p.matrix, [0, 0, -50])[2], 1.0)

    def test_perspective(self):
        np.testing.assert_allclose(perspective(.25, 1, 1, 100).matrix,
                                   frustum(-1, 1, -1, 1, 1, 100).matrix)
        p = perspective(1 / 6, 16 / 9, .1, 10)
        self.assertAlmostEqual(p.top, .1 * np.tan(np.pi / 6))
        self.assertAlmostEqual(p.right, p.top * 16 / 9)
        self.assertTrue(p.is_centered)

    def test_named_sizes(self):
        p = Projection(width=4, height=2, near=2, far=20)
        self.assertEqual((p.left, p.right, p.bottom, p.top), (-2.0, 2.0, -1.0, 1.0))
        p = Projection(left=0, width=3, top=1, height=4)
        self.assertEqual((p.left, p.right, p.bottom, p.top), (0.0, 3.0, -3.0, 1.0))
        p = Projection(bottom=-1, top=1, aspect=16 / 9)
        self.assertAlmostEqual(p.right, 16 / 9)
        self.assertAlmostEqual(p.left, -16 / 9)
        # an under-specified frustum falls back to [-1, 1]
        p = Projection(left=-3, near=1, far=10)
        self.assertEqual((p.left, p.right, p.bottom, p.top), (-3.0, 1.0, -1.0, 1.0))

    def test_fov_matches_perspective(self):
        p = Projection(fov=1 / 5, aspect=4 / 3, near=1, far=10000)
        np.testing.assert_allclose(p.matrix, perspective(1 / 5, 4 / 3, 1, 10000).matrix)
        self.assertAlmostEqual(p.top, np.tan(np.pi / 5))
        self.assertTrue(p.is_centered)

    def test_invalid_named_sizes(self):
        with self.assertRaises(InvalidProjectionError):
            Projection(left=-1, right=1, width=5)
        with self.assertRaises(InvalidProjectionError):
            Projection(height=0)
        with self.assertRaises(InvalidProjectionError):
            Projection(fov=.5)

    def test_invalid(self):
        for args in ((1, 1, -1, 1, 1, 10), (-1, 1, 2, 2, 1, 10), (-1, 1, -1, 1, 5, 5),
                     (-1, 1, -1, 1, 0, 10), (-1, 1, -1, 1, -1, 10)):
            with self.assertRaises(InvalidProjectionError, msg=repr(args)):
                frustum(*args)
        for fov in (0, .5, -.1, 1):
            with self.assertRaises(ValueError):
                perspective(fov, 1, 1, 10)

    def test_repr(self):
        self.assertEqual(repr(frustum(-1, 1, -2, 2, 1, 9)),
                         "Projection(left=-1.0, right=1.0, bottom=-2.0, top=2.0, near=1.0, far=9.0)")


class TestCombinedMatrix(unittest.TestCase):
    def setUp(self):
        self.proj = perspective(.2, 1.5, .5, 500)
        self.camera = space().translate(3, -2, 10).rotate(.1, [0, 1, 1])

    def test_without_space(self):
        np.testing.assert_array_equal(self.proj.gl_matrix(), self.proj.matrix.ravel(order="F"))

    def test_with_space(self):
        gl = np.array(self.proj.gl_matrix(self.camera)).reshape(4, 4).T
        view = np.array(self.camera.get_4x4_projection()).reshape(4, 4).T
        np.testing.assert_allclose(gl, self.proj.matrix @ view, atol=1e-12)
        # a point one unit in front of the camera lands in the middle of the screen
        ahead = self.camera.unproject([0, 0, -1])
        np.testing.assert_allclose(to_ndc(gl, ahead)[:2], [0, 0], atol=1e-9)

    def test_packed(self):
        as_float = self.proj.gl_matrix_packed_float(self.camera)
        as_double = self.proj.gl_matrix_packed_double(self.camera)
        self.assertEqual(len(as_float), 64)
        self.assertEqual(len(as_double), 128)
        np.testing.assert_array_equal(np.frombuffer(as_double, dtype=np.float64),
                                      self.proj.gl_matrix(self.camera))
        np.testing.assert_allclose(np.frombuffer(as_float, dtype=np.float32),
                                   self.proj.gl_matrix(self.camera), rtol=1e-6)


if __name__ == "__main__":
    unittest.main()
