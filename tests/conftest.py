import textwrap

import pytest

SCRAPE = textwrap.dedent("""\
    # HELP apiserver_request_count foo
    # TYPE apiserver_request_count counter
    apiserver_request_count{client="a",resource="pods",verb="get"} 3
    apiserver_request_count{client="a",resource="nodes",verb="list"} 2
    """)


KUBECONFIG = textwrap.dedent("""\
    apiVersion: v1
    kind: Config
    current-context: admin
    clusters:
    - name: demo
      cluster:
        certificate-authority-data: Zm9v
        server: https://api.demo.example.com:6443
    contexts:
    - name: admin
      context:
        cluster: demo
        user: admin
    users:
    - name: admin
      user: {}
    """)


@pytest.fixture
def scrape_text():
    return SCRAPE


@pytest.fixture
def write_kubeconfig(tmp_path):
    def _write(body: str = KUBECONFIG) -> str:
        path = tmp_path / "kubeconfig"
        path.write_text(body, encoding="utf-8")
        return str(path)
    return _write


@pytest.fixture
def kubeconfig_path(write_kubeconfig):
    return write_kubeconfig()
