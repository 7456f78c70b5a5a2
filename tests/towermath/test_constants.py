"""Tests for the canonical constants."""

import threading

import pytest

from numtower.core.errors import PrecisionPolicyError
from numtower.math import (
    UNLIMITED,
    Euler,
    Identity,
    ImaginaryUnit,
    Integer,
    One,
    Pi,
    PrecisionPolicy,
    Real,
    Runtime,
    Zero,
)


class TestIdentities:
    """Test Zero, One and the imaginary unit."""

    def test_zero(self):
        """Test the additive identity."""
        zero = Zero.instance_for()
        assert zero == 0
        assert zero.algebraic_identity is Identity.ADDITIVE
        assert isinstance(zero, Integer)

    def test_one(self):
        """Test the multiplicative identity."""
        one = One.instance_for()
        assert one == 1
        assert one.algebraic_identity is Identity.MULTIPLICATIVE

    def test_with_policy_stays_canonical(self):
        """Test that re-policied identities are still the canonical instances."""
        policy = PrecisionPolicy(5)
        assert One.instance_for().with_policy(policy) is One.instance_for(policy)

    def test_imaginary_unit_squared(self):
        """Test that i squared is -1."""
        assert ImaginaryUnit.instance_for() ** 2 == -1


class TestCanonicalInstances:
    """Test the per-policy instance cache."""

    def test_same_policy_same_instance(self):
        """Test that repeated requests share an instance."""
        policy = PrecisionPolicy(12)
        assert Pi.instance_for(policy) is Pi.instance_for(PrecisionPolicy(12))

    def test_policies_are_distinct(self):
        """Test that each policy has its own instance."""
        assert Pi.instance_for(PrecisionPolicy(8)) is not Pi.instance_for(PrecisionPolicy(9))

    def test_runtimes_are_independent(self):
        """Test that separate runtimes keep separate caches."""
        policy = PrecisionPolicy(8)
        assert Pi.instance_for(policy, Runtime()) is not Pi.instance_for(policy, Runtime())

    def test_concurrent_requests(self):
        """Test that racing threads receive one instance."""
        policy = PrecisionPolicy(40)
        results = []
        barrier = threading.Barrier(8)

        def worker():
            barrier.wait()
            results.append(Pi.instance_for(policy))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(results) == 8
        assert all(result is results[0] for result in results)


class TestPi:
    """Test pi."""

    def test_eight_digits(self):
        """Test pi to eight significant digits."""
        assert Pi.instance_for(PrecisionPolicy(8)) == Real("3.1415927")

    def test_thirty_digits(self):
        """Test pi to thirty significant digits."""
        assert Pi.instance_for(PrecisionPolicy(30)) == Real("3.14159265358979323846264338328")

    def test_irrational(self):
        """Test that pi is flagged irrational."""
        pi = Pi.instance_for(PrecisionPolicy(10))
        assert pi.irrational
        assert not pi.is_exact()

    def test_unlimited_rejected(self):
        """Test that pi needs a finite policy."""
        with pytest.raises(PrecisionPolicyError):
            Pi.instance_for(UNLIMITED)


class TestEuler:
    """Test Euler's number."""

    def test_ten_digits(self):
        """Test e to ten significant digits."""
        assert Euler.instance_for(PrecisionPolicy(10)) == Real("2.718281828")

    def test_twenty_five_digits(self):
        """Test e to twenty-five significant digits."""
        assert Euler.instance_for(PrecisionPolicy(25)) == Real("2.718281828459045235360287")

    def test_uses_factorial_cache(self, runtime):
        """Test that construction memoizes the factorials it needs."""
        Euler.instance_for(PrecisionPolicy(10))
        assert 15 in runtime.factorials

    def test_exp(self, assert_close):
        """Test raising e to a power."""
        e = Euler.instance_for(PrecisionPolicy(12))
        assert_close(e.exp(2), "7.38905609893065", digits=10)
