from setuptools import find_packages, setup

package_name = "localfit"

setup(
    name=package_name,
    version="0.1.0",
    packages=find_packages(exclude=["test", "test.*"]),
    package_data={
        package_name: ["config/*.yaml"],
    },
    include_package_data=True,
    python_requires=">=3.10",
    install_requires=["setuptools", "numpy", "scipy", "jax", "pyyaml", "pydantic>=2"],
    extras_require={
        "test": ["pytest"],
    },
    zip_safe=False,
    description="Local weighted fitting of geometric primitives on point clouds (accumulate/finalize engine + batched JAX plane fit)",
    license="Apache-2.0",
    tests_require=["pytest"],
)
