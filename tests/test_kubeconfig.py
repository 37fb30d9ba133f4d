import textwrap

import pytest

from apiquant.kubeconfig import KubeconfigError, load_kubeconfig, server_hostname


def _kc(body: str) -> str:
    return textwrap.dedent(body)


class TestLoadKubeconfig:
    def test_resolves_current_server(self, kubeconfig_path):
        assert load_kubeconfig(kubeconfig_path).current_server() == "https://api.demo.example.com:6443"

    def test_unreadable_file(self, tmp_path):
        with pytest.raises(KubeconfigError, match="unable to read"):
            load_kubeconfig(str(tmp_path / "missing"))

    def test_not_yaml(self, write_kubeconfig):
        path = write_kubeconfig("current-context: [unclosed\n")
        with pytest.raises(KubeconfigError, match="unable to parse"):
            load_kubeconfig(path)

    def test_not_a_mapping(self, write_kubeconfig):
        path = write_kubeconfig("- just\n- a list\n")
        with pytest.raises(KubeconfigError, match="unable to parse"):
            load_kubeconfig(path)

    def test_wrong_types(self, write_kubeconfig):
        path = write_kubeconfig("current-context: admin\ncontexts: 12\n")
        with pytest.raises(KubeconfigError, match="unable to parse"):
            load_kubeconfig(path)


class TestCurrentServer:
    @pytest.mark.parametrize("body, message", [
        ("contexts: []\n", "empty current-context"),
        ("current-context: admin\n", "no contexts found"),
        (_kc("""\
            current-context: admin
            contexts:
            - name: admin
              context: {cluster: demo}
            clusters: []
            """), "no clusters found"),
        (_kc("""\
            current-context: other
            contexts:
            - name: admin
              context: {cluster: demo}
            clusters:
            - name: demo
              cluster: {server: "https://h:6443"}
            """), r"unable to find current context \(other\)"),
        (_kc("""\
            current-context: admin
            contexts:
            - name: admin
              context: {cluster: nope}
            clusters:
            - name: demo
              cluster: {server: "https://h:6443"}
            """), r"unable to find current cluster \(nope\)"),
    ])
    def test_lookup_failures(self, write_kubeconfig, body, message):
        kc = load_kubeconfig(write_kubeconfig(body))
        with pytest.raises(KubeconfigError, match=message):
            kc.current_server()

    def test_empty_file_reports_missing_context(self, write_kubeconfig):
        kc = load_kubeconfig(write_kubeconfig(""))
        with pytest.raises(KubeconfigError, match="empty current-context"):
            kc.current_server()


class TestServerHostname:
    @pytest.mark.parametrize("server, host", [
        ("https://api.demo.example.com:6443", "api.demo.example.com"),
        ("http://10.0.0.1:8080", "10.0.0.1"),
        ("https://api.demo.example.com", "api.demo.example.com"),
        ("https://api.demo.example.com:6443/some/path", "api.demo.example.com"),
    ])
    def test_valid(self, server, host):
        assert server_hostname(server) == host

    @pytest.mark.parametrize("server", ["api.demo.example.com:6443", "https://", "https://:6443"])
    def test_malformed(self, server):
        with pytest.raises(KubeconfigError, match="malformed cluster hostname"):
            server_hostname(server)


class TestUnusualInput:
    def test_invalid_utf8_is_unreadable(self, tmp_path):
        path = tmp_path / "kubeconfig"
        path.write_bytes(b"current-context: \xff\xfe\n")
        with pytest.raises(KubeconfigError, match="unable to read"):
            load_kubeconfig(str(path))

    def test_numeric_names_are_kept_as_text(self, write_kubeconfig):
        path = write_kubeconfig(_kc("""\
            current-context: 2019
            contexts:
            - name: 2019
              context: {cluster: 1}
            clusters:
            - name: 1
              cluster: {server: "https://api.demo.example.com:6443"}
            """))
        kc = load_kubeconfig(path)
        assert kc.current_context == "2019"
        assert kc.current_server() == "https://api.demo.example.com:6443"
