"""Tests for the quadrilateral elements."""

from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest
import pytest_check as check

from mpmcell.elements import kernels
from mpmcell.elements.element import ElementDegree, ShapefnType
from mpmcell.elements.quadrilateral import (
    Quad4Element,
    Quad8Element,
    Quad9Element,
    QuadrilateralElement,
)


ELEMENTS = [Quad4Element, Quad8Element, Quad9Element]
GAUSS_2X2 = np.array(
    [
        [-1.0 / np.sqrt(3), -1.0 / np.sqrt(3)],
        [1.0 / np.sqrt(3), -1.0 / np.sqrt(3)],
        [1.0 / np.sqrt(3), 1.0 / np.sqrt(3)],
        [-1.0 / np.sqrt(3), 1.0 / np.sqrt(3)],
    ]
)


def reference_points() -> list[tuple[float, float]]:
    """Returns a grid of points covering the reference square, including its edges.

    Returns:
        List of reference points.
    """
    ticks = np.linspace(-1.0, 1.0, 7)

    return [(xi, eta) for xi in ticks for eta in ticks] + [(0.123, -0.876)]


def distorted_coordinates(element: QuadrilateralElement) -> np.ndarray:
    """Returns nodal coordinates of a distorted (but valid) element.

    The corners form a general convex quadrilateral, mid-side nodes sit at the
    middle of the straight sides and the centre node at the mean of the corners.

    Args:
        element: Element to generate coordinates for.

    Returns:
        ``num_functions x 2`` nodal coordinates.
    """
    corners = np.array([[0.0, 0.0], [2.0, 0.2], [2.5, 2.0], [0.3, 1.5]])
    coords = [*corners]

    if element.num_functions() >= 8:
        coords += [0.5 * (corners[i] + corners[(i + 1) % 4]) for i in range(4)]

    if element.num_functions() == 9:
        coords.append(np.mean(corners, axis=0))

    return np.array(coords)


@pytest.mark.parametrize("element_class", ELEMENTS)
def test_partition_of_unity(element_class):
    """Tests that the shape functions sum to one over the reference square."""
    element = element_class()

    for xi in reference_points():
        check.almost_equal(np.sum(element.shape_functions(xi)), 1.0, abs=1e-10)


@pytest.mark.parametrize("element_class", ELEMENTS)
def test_derivatives_sum_to_zero(element_class):
    """Tests that the derivatives of a constant field vanish."""
    element = element_class()

    for xi in reference_points():
        dn = element.shape_functions_derivatives(xi)

        assert dn.shape == (element.num_functions(), 2)
        check.almost_equal(np.sum(dn[:, 0]), 0.0, abs=1e-10)
        check.almost_equal(np.sum(dn[:, 1]), 0.0, abs=1e-10)


@pytest.mark.parametrize("element_class", ELEMENTS)
def test_kronecker_delta(element_class):
    """Tests that each shape function is one at its node and zero at the others."""
    element = element_class()
    unit = element.unit_cell_coordinates()

    for idx, xi in enumerate(unit):
        n = element.shape_functions(xi)
        expected = np.zeros(element.num_functions())
        expected[idx] = 1.0

        np.testing.assert_allclose(n, expected, atol=1e-12)


@pytest.mark.parametrize("element_class", ELEMENTS)
def test_derivatives_finite_difference(element_class):
    """Tests the derivatives against central finite differences."""
    element = element_class()
    h = 1e-6

    for xi, eta in [(0.3, -0.2), (-0.7, 0.9), (0.0, 0.0)]:
        dn = element.shape_functions_derivatives((xi, eta))
        dn_dxi = (
            element.shape_functions((xi + h, eta))
            - element.shape_functions((xi - h, eta))
        ) / (2 * h)
        dn_deta = (
            element.shape_functions((xi, eta + h))
            - element.shape_functions((xi, eta - h))
        ) / (2 * h)

        np.testing.assert_allclose(dn[:, 0], dn_dxi, atol=1e-8)
        np.testing.assert_allclose(dn[:, 1], dn_deta, atol=1e-8)


def test_quad4_values():
    """Tests the Quad4 shape functions at the centre of the element."""
    element = Quad4Element()

    np.testing.assert_allclose(element.shape_functions((0.0, 0.0)), [0.25] * 4)
    np.testing.assert_allclose(
        element.shape_functions_derivatives((0.0, 0.0)),
        [[-0.25, -0.25], [0.25, -0.25], [0.25, 0.25], [-0.25, 0.25]],
    )


def test_quad9_centre_node():
    """Tests that the centre node of a Quad9 carries all weight at the origin."""
    element = Quad9Element()
    n = element.shape_functions((0.0, 0.0))

    check.almost_equal(n[8], 1.0)
    check.almost_equal(np.sum(np.abs(n[:8])), 0.0, abs=1e-14)


def test_size_aware_overload_is_plain_evaluation():
    """Tests that particle size arguments do not change the shape functions."""
    element = Quad8Element()
    xi = (0.2, -0.6)
    plain = element.shape_functions(xi)
    sized = element.shape_functions(
        xi, number_of_particles=4, deformation_gradient=np.array([1.1, 0.9])
    )

    np.testing.assert_array_equal(plain, sized)
    np.testing.assert_array_equal(
        element.shape_functions_derivatives(xi),
        element.shape_functions_derivatives(xi, number_of_particles=4),
    )


@pytest.mark.parametrize("element_class", ELEMENTS)
def test_invalid_reference_point(element_class):
    """Tests that reference points with the wrong dimension are rejected."""
    element = element_class()

    with pytest.raises(ValueError, match="must have 2 entries"):
        element.shape_functions((0.0, 0.0, 0.0))

    with pytest.raises(ValueError, match="must have 2 entries"):
        element.shape_functions_derivatives([0.5])


@pytest.mark.parametrize("element_class", ELEMENTS)
def test_invalid_dimension(element_class):
    """Tests that quadrilaterals can only be created in two dimensions."""
    with pytest.raises(ValueError, match="Invalid dimension"):
        element_class(dim=3)


@pytest.mark.parametrize("num_functions", [3, 6, 10])
def test_invalid_number_of_functions(num_functions):
    """Tests that only 4, 8 and 9-noded quadrilaterals can be created."""
    with pytest.raises(ValueError, match="is not defined"):
        QuadrilateralElement(
            dim=2,
            num_functions=num_functions,
            shape_functions_kernel=kernels.quad4_shape_functions,
            shape_functions_derivatives_kernel=(
                kernels.quad4_shape_functions_derivatives
            ),
        )


def test_degree_and_type():
    """Tests the degree and type of each element."""
    assert Quad4Element().degree() == ElementDegree.LINEAR
    assert Quad8Element().degree() == ElementDegree.QUADRATIC
    assert Quad9Element().degree() == ElementDegree.QUADRATIC

    for element_class in ELEMENTS:
        assert element_class().shapefn_type() == ShapefnType.NORMAL_MPM


@pytest.mark.parametrize("element_class", ELEMENTS)
def test_index_tables(element_class):
    """Tests the side, corner and sub-triangle tables of each element."""
    element = element_class()
    unit = element.unit_cell_coordinates()

    assert unit.shape == (element.num_functions(), 2)
    np.testing.assert_array_equal(element.corner_indices(), [0, 1, 2, 3])
    np.testing.assert_array_equal(
        element.sides_indices(), [[0, 1], [1, 2], [2, 3], [3, 0]]
    )

    # corners are counter-clockwise from (-1, -1)
    np.testing.assert_array_equal(
        unit[element.corner_indices()],
        [[-1.0, -1.0], [1.0, -1.0], [1.0, 1.0], [-1.0, 1.0]],
    )

    # sub-triangles are counter-clockwise and tile the reference square
    inhedron = element.inhedron_indices()
    assert inhedron.shape[1] == 3
    assert inhedron.max() < element.num_functions()

    total_area = 0.0

    for tri in inhedron:
        (x1, y1), (x2, y2), (x3, y3) = unit[tri]
        area = 0.5 * ((x2 - x1) * (y3 - y1) - (x3 - x1) * (y2 - y1))
        check.greater(area, 0.0)
        total_area += area

    check.almost_equal(total_area, 4.0)


def test_unit_cell_coordinates_are_copies():
    """Tests that the returned tables cannot modify the shared element."""
    element = Quad9Element()
    unit = element.unit_cell_coordinates()
    unit[:] = 0.0

    check.almost_equal(element.unit_cell_coordinates()[0, 0], -1.0)


def test_quad4_jacobian_unit_cell():
    """Tests that the Quad4 Jacobian on its own unit cell is the identity."""
    element = Quad4Element()
    unit = element.unit_cell_coordinates()

    for xi in reference_points():
        np.testing.assert_allclose(element.jacobian(xi, unit), np.eye(2), atol=1e-14)
        check.almost_equal(element.jacobian_determinant(xi, unit), 1.0)


@pytest.mark.parametrize("element_class", ELEMENTS)
def test_jacobian_rectangle(element_class):
    """Tests the Jacobian of an element stretched onto a 4 x 1 rectangle."""
    element = element_class()
    unit = element.unit_cell_coordinates()
    coords = unit * np.array([2.0, 0.5]) + np.array([3.0, -1.0])

    for xi in [(0.0, 0.0), (0.5, -0.25), (-1.0, 1.0)]:
        np.testing.assert_allclose(
            element.jacobian(xi, coords), np.diag([2.0, 0.5]), atol=1e-12
        )


@pytest.mark.parametrize("element_class", ELEMENTS)
def test_inverted_element(element_class):
    """Tests that an inverted element has a negative determinant and is rejected."""
    element = element_class()
    inverted = element.unit_cell_coordinates() * np.array([-1.0, 1.0])

    check.almost_equal(element.jacobian_determinant((0.2, 0.1), inverted), -1.0)

    with pytest.raises(RuntimeError, match="not positive"):
        element.jacobian((0.2, 0.1), inverted)

    with pytest.raises(RuntimeError, match="not positive"):
        element.b_matrix((0.2, 0.1), inverted)

    with pytest.raises(RuntimeError, match="not positive"):
        element.laplace_matrix(GAUSS_2X2, inverted)


def test_self_intersecting_quad4():
    """Tests a bow-tie Quad4, which is inverted over part of its domain."""
    element = Quad4Element()
    bow_tie = np.array([[0.0, 0.0], [1.0, 0.0], [0.0, 1.0], [1.0, 1.0]])

    check.less(element.jacobian_determinant((0.0, 0.9), bow_tie), 0.0)

    with pytest.raises(RuntimeError, match="degenerate or inverted"):
        element.jacobian((0.0, 0.9), bow_tie)


def test_collapsed_element():
    """Tests that an element with zero area is rejected."""
    element = Quad4Element()
    collapsed = np.array([[0.0, 0.0], [1.0, 0.0], [2.0, 0.0], [3.0, 0.0]])

    with pytest.raises(RuntimeError, match="not positive"):
        element.jacobian((0.0, 0.0), collapsed)


def test_jacobian_wrong_coordinates_shape():
    """Tests that nodal coordinates with the wrong shape are rejected."""
    element = Quad8Element()

    with pytest.raises(ValueError, match="must have shape"):
        element.jacobian((0.0, 0.0), Quad4Element().unit_cell_coordinates())


def test_b_matrix_unit_cell():
    """Tests the reference B matrix of a Quad4 at the centre."""
    element = Quad4Element()
    b_mats = element.b_matrix((0.0, 0.0))

    assert len(b_mats) == 4
    np.testing.assert_allclose(
        b_mats[0], [[-0.25, 0.0], [0.0, -0.25], [-0.25, -0.25]]
    )
    np.testing.assert_allclose(b_mats[2], [[0.25, 0.0], [0.0, 0.25], [0.25, 0.25]])


@pytest.mark.parametrize("element_class", ELEMENTS)
def test_b_matrix_linear_displacement(element_class):
    """Tests that a linear displacement field gives exact constant strains."""
    element = element_class()
    coords = distorted_coordinates(element)

    # u_x = 0.01 x + 0.03 y, u_y = 0.02 y + 0.01 x
    u = np.column_stack(
        [
            0.01 * coords[:, 0] + 0.03 * coords[:, 1],
            0.02 * coords[:, 1] + 0.01 * coords[:, 0],
        ]
    )

    for xi in [(0.0, 0.0), (0.4, -0.7), (-0.9, 0.9)]:
        b_mats = element.b_matrix(xi, coords)
        strain = sum(b_i @ u_i for b_i, u_i in zip(b_mats, u))

        np.testing.assert_allclose(strain, [0.01, 0.02, 0.04], atol=1e-12)


@pytest.mark.parametrize("element_class", ELEMENTS)
def test_b_matrix_rigid_translation(element_class):
    """Tests that a rigid translation produces no strain."""
    element = element_class()
    coords = distorted_coordinates(element)
    u = np.tile([0.3, -0.2], (element.num_functions(), 1))

    b_mats = element.b_matrix((0.25, 0.5), coords)
    strain = sum(b_i @ u_i for b_i, u_i in zip(b_mats, u))

    np.testing.assert_allclose(strain, np.zeros(3), atol=1e-12)


@pytest.mark.parametrize("element_class", ELEMENTS)
def test_mass_matrix(element_class):
    """Tests that the mass matrix is symmetric and positive semi-definite."""
    element = element_class()
    m_el = element.mass_matrix(GAUSS_2X2)

    assert m_el.shape == (element.num_functions(), element.num_functions())
    np.testing.assert_allclose(m_el, m_el.transpose(), atol=1e-14)
    check.greater_equal(np.linalg.eigvalsh(m_el).min(), -1e-12)

    # unit weights are the 2 x 2 gauss weights, i.e. the area of the unit cell
    check.almost_equal(np.sum(m_el), 4.0)


@pytest.mark.parametrize("element_class", ELEMENTS)
def test_mass_matrix_weights(element_class):
    """Tests the mass matrix with explicit quadrature weights."""
    element = element_class()
    rule = element.quadrature(3)
    m_el = element.mass_matrix(rule.points, rule.weights)

    check.almost_equal(np.sum(m_el), 4.0)

    with pytest.raises(ValueError, match="Number of weights"):
        element.mass_matrix(rule.points, rule.weights[:-1])


def test_quad4_laplace_matrix():
    """Tests the Quad4 Laplace matrix on its unit cell against the exact result."""
    element = Quad4Element()
    l_el = element.laplace_matrix(GAUSS_2X2, element.unit_cell_coordinates())

    expected = np.array(
        [
            [4.0, -1.0, -2.0, -1.0],
            [-1.0, 4.0, -1.0, -2.0],
            [-2.0, -1.0, 4.0, -1.0],
            [-1.0, -2.0, -1.0, 4.0],
        ]
    ) / 6.0

    np.testing.assert_allclose(l_el, expected, atol=1e-12)


@pytest.mark.parametrize("element_class", ELEMENTS)
def test_laplace_matrix(element_class):
    """Tests that the Laplace matrix is symmetric, PSD and annihilates constants."""
    element = element_class()
    coords = distorted_coordinates(element)
    l_el = element.laplace_matrix(element.quadrature(3).points, coords)

    np.testing.assert_allclose(l_el, l_el.transpose(), atol=1e-12)
    check.greater_equal(np.linalg.eigvalsh(l_el).min(), -1e-10)
    np.testing.assert_allclose(
        l_el @ np.ones(element.num_functions()),
        np.zeros(element.num_functions()),
        atol=1e-10,
    )


@pytest.mark.parametrize("element_class", ELEMENTS)
def test_integration_points_shape(element_class):
    """Tests that points with the wrong dimension are rejected."""
    element = element_class()
    coords = element.unit_cell_coordinates()

    with pytest.raises(ValueError, match="Points must have shape"):
        element.mass_matrix(np.zeros((2, 3)))

    with pytest.raises(ValueError, match="Points must have shape"):
        element.laplace_matrix(np.zeros((2, 3)), coords)

    with pytest.raises(ValueError, match="Points must have shape"):
        element.mass_matrix(np.zeros(6))

    with pytest.raises(ValueError, match="Points must have shape"):
        element.mass_matrix(np.zeros((1, 2, 2)))

    # a single point as a vector
    np.testing.assert_allclose(
        element.mass_matrix(np.zeros(2)), element.mass_matrix(np.zeros((1, 2)))
    )
    np.testing.assert_allclose(
        element.laplace_matrix([0.0, 0.0], coords),
        element.laplace_matrix([[0.0, 0.0]], coords),
    )


@pytest.mark.parametrize("element_class", ELEMENTS)
def test_natural_coordinates(element_class):
    """Tests that mapping a physical point back gives its reference coordinates."""
    element = element_class()
    coords = distorted_coordinates(element)

    for xi in [(0.3, -0.4), (-0.8, 0.95), (1.0, 1.0)]:
        point = element.shape_functions(xi) @ coords

        np.testing.assert_allclose(
            element.natural_coordinates(point, coords), xi, atol=1e-9
        )


def test_natural_coordinates_no_convergence():
    """Tests that a mapping which does not converge raises an error."""
    element = Quad4Element()
    coords = distorted_coordinates(element)

    with pytest.raises(RuntimeError, match="did not converge"):
        element.natural_coordinates((1.0, 1.0), coords, max_iterations=0)


def test_quadrature():
    """Tests the quadrature rules of the quadrilateral elements."""
    element = Quad4Element()

    for n_points in [1, 2, 3]:
        rule = element.quadrature(n_points)

        assert len(rule) == n_points**2
        assert rule.points.shape == (n_points**2, 2)
        check.almost_equal(np.sum(rule.weights), 4.0)

    np.testing.assert_allclose(
        np.abs(element.quadrature(2).points), np.full((4, 2), 1.0 / np.sqrt(3))
    )

    with pytest.raises(ValueError, match="must be 1, 2 or 3"):
        element.quadrature(4)


@pytest.mark.parametrize("element_class", ELEMENTS)
def test_concurrent_evaluation(element_class):
    """Tests that a shared element gives the same results from several threads."""
    element = element_class()
    coords = distorted_coordinates(element)
    points = reference_points()

    def evaluate(xi):
        return element.shape_functions(xi), element.jacobian(xi, coords)

    serial = [evaluate(xi) for xi in points]

    with ThreadPoolExecutor(max_workers=4) as executor:
        parallel = list(executor.map(evaluate, points))

    for (n_s, j_s), (n_p, j_p) in zip(serial, parallel):
        np.testing.assert_array_equal(n_s, n_p)
        np.testing.assert_array_equal(j_s, j_p)
