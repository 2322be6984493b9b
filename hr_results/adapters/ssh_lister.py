"""List the HR result files on the production host over ssh."""

import logging

import paramiko

from .base import FileLister


logger = logging.getLogger('hr_results.lister')


class SshFileLister(FileLister):
    """Run `ls` on the production host and return its output.

    Args:
        host: ssh destination, "user@hostname" or just "hostname".
        dir_path: Directory to list; '{owYear}' is replaced by the year.
        key_file: Optional private key file; otherwise the ssh agent and
                  default keys are used.
    """

    def __init__(self, host: str, dir_path: str, key_file: str | None = None):
        self.user, _, self.hostname = host.rpartition('@')
        self.dir_path = dir_path
        self.key_file = key_file

    def command(self, year: int) -> str:
        path = self.dir_path.replace('{owYear}', str(year))
        return f'( ls {path} )'

    def _ssh_connect(self) -> paramiko.SSHClient:
        client = paramiko.SSHClient()
        client.load_system_host_keys()
        client.set_missing_host_key_policy(paramiko.AutoAddPolicy())

        kwargs = {'hostname': self.hostname}
        if self.user:
            kwargs['username'] = self.user
        if self.key_file:
            kwargs['key_filename'] = self.key_file
        client.connect(**kwargs)
        return client

    def list_files(self, year: int) -> list[str]:
        """Return the file names in the year's production directory.

        A failing connection or command is logged, not raised: whatever
        was written to stdout (usually nothing) is returned.
        """
        cmd = self.command(year)
        logger.debug(f'[{self.hostname}] executing: {cmd}')
        try:
            client = self._ssh_connect()
        except (paramiko.SSHException, OSError) as e:
            logger.error(f'Unable to connect to {self.hostname}: {e}')
            return []

        output = ''
        try:
            _, stdout, stderr = client.exec_command(cmd)
            output = stdout.read().decode()
            exit_status = stdout.channel.recv_exit_status()
            if exit_status != 0:
                logger.error(f'Remote listing for {year} exited with status '
                             f'{exit_status}: {stderr.read().decode().strip()}')
        except paramiko.SSHException as e:
            logger.error(f'Remote listing for {year} failed: {e}')
        finally:
            client.close()

        files = [line.strip() for line in output.splitlines() if line.strip()]
        logger.info(f'Here are the hr files for {year} so far:\n ' + '\n '.join(files))
        return files
